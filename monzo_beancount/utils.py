import pathlib


def strip_base_path(
    base: pathlib.Path | pathlib.PurePath,
    filepath: str | pathlib.Path | pathlib.PurePath,
    pure_posix: bool = False,
) -> str:
    """Strip file base path (parent folder) from given file path"""
    if not isinstance(filepath, pathlib.PurePath):
        if pure_posix:
            filepath = pathlib.PurePosixPath(filepath)
        else:
            filepath = pathlib.Path(filepath)
    return filepath.relative_to(base).as_posix()


def include_path(filepath: str | pathlib.PurePath) -> str:
    """Keep only the parent folder and file name, /data/include/a.beancount -> include/a.beancount"""
    path = pathlib.PurePosixPath(pathlib.PurePath(filepath).as_posix())
    if len(path.parts) < 2 or path.parent.name == "":
        raise ValueError(f"Invalid file name {filepath}")
    return strip_base_path(path.parent.parent, path, pure_posix=True)
