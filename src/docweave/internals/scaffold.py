"""User directory structure creation and initialization.

On first run, this creates:
- ~/Documents/docweave/
  ├── README.md           (explains what each folder is for)
  ├── input/              (optional staging for .docx / .json sources)
  ├── output/             (converted files land here)
  ├── logs/               (docweave.log lives here)
  ├── configs/            (sample_config.toml)
  └── manifests/          (one JSON record per pipeline run)

Safe to call repeatedly - won't overwrite existing user files.
"""

import logging
from pathlib import Path

from docweave.internals.config.define_config import UserConfig
from docweave.internals.paths import (
    user_base_dir,
    user_configs_dir,
    user_input_dir,
    user_log_dir_path,
    user_manifests_dir,
    user_output_dir,
)

log = logging.getLogger("docweave")

SAMPLE_CONFIG_FILENAME = "sample_config.toml"

README_TEXT = """# docweave

This folder was created automatically by docweave.

- `input/`: put .docx files (or saved .json documents) here to convert them.
- `output/`: converted block/node JSON, HTML and Word XML files are saved here.
- `logs/`: `docweave.log`, useful when reporting a problem.
- `configs/`: `sample_config.toml` shows every setting; copy it and pass it with `--config`.
- `manifests/`: one JSON record per conversion run.
"""


def ensure_user_scaffold() -> None:
    """Create the folder structure, README and sample config if they are missing."""
    base = user_base_dir()

    # paths.py functions create the folders
    user_input_dir()
    user_output_dir()
    user_log_dir_path()
    user_manifests_dir()
    configs = user_configs_dir()

    readme_path = base / "README.md"
    if not readme_path.exists():
        readme_path.write_text(README_TEXT, encoding="utf-8")
        log.info(f"Created new README at {readme_path}")

    _write_sample_config_if_missing(configs / SAMPLE_CONFIG_FILENAME)

    log.debug(f"User scaffold ready at {base}")


def _write_sample_config_if_missing(path: Path) -> None:
    if path.exists():
        log.debug(f"Sample config already exists (not overwriting): {path}")
        return
    try:
        UserConfig.with_defaults().save_toml(path)
        log.info(f"Wrote sample config: {path}")
    except OSError as e:
        log.warning(f"Could not write sample config to {path}: {e}")
