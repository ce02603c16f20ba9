"""Cross-platform path resolution for user directories.

platformdirs picks the OS-appropriate Documents folder; everything docweave
writes lives in a subfolder of it:
- logs/       (docweave.log)
- output/     (converted JSON, HTML and XML files)
- input/      (optional staging area for .docx / .json sources)
- configs/    (saved TOML configurations)
- manifests/  (one JSON record per pipeline run)
"""

from pathlib import Path

from platformdirs import user_documents_dir

PACKAGE_NAME = "docweave"


# region user_base_dir
def user_base_dir() -> Path:
    """
    Base directory for all docweave user files.

    Returns:
        Path to ~/Documents/docweave/ (or the OS equivalent)
    """
    base = Path(user_documents_dir()) / PACKAGE_NAME
    base.mkdir(parents=True, exist_ok=True)
    return base


# endregion


# region _user_subdir
def _user_subdir(name: str) -> Path:
    folder = user_base_dir() / name
    folder.mkdir(parents=True, exist_ok=True)
    return folder


# endregion


# region user subfolders
def user_log_dir_path() -> Path:
    """~/Documents/docweave/logs/"""
    return _user_subdir("logs")


def user_output_dir() -> Path:
    """~/Documents/docweave/output/, the default save location."""
    return _user_subdir("output")


def user_input_dir() -> Path:
    """~/Documents/docweave/input/"""
    return _user_subdir("input")


def user_configs_dir() -> Path:
    """~/Documents/docweave/configs/"""
    return _user_subdir("configs")


def user_manifests_dir() -> Path:
    """~/Documents/docweave/manifests/"""
    return _user_subdir("manifests")


# endregion
