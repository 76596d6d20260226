"""
Pytest configuration and shared fixtures.

Fixtures here build small BIDS trees under pytest's tmp_path.
"""

import json
from pathlib import Path
from typing import Callable

import pytest

from bidslayout.config import settings as settings_module


def write_json(path: Path, content) -> Path:
    """Write content as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(content), encoding='utf-8')
    return path


def write_tsv(path: Path, header: list[str], rows: list[list[str]]) -> Path:
    """Write a tab-separated table, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ['\t'.join(header)] + ['\t'.join(row) for row in rows]
    path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
    return path


def touch(path: Path) -> Path:
    """Create an empty file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()
    return path


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep every test away from the user's persistent data directory."""
    data_dir = tmp_path / "appdata"
    data_dir.mkdir()
    monkeypatch.setattr(settings_module, "get_persistent_data_directory", lambda: data_dir)
    monkeypatch.setattr(settings_module, "_settings_manager", None)
    return data_dir


@pytest.fixture
def make_dataset(tmp_path) -> Callable[..., Path]:
    """
    Factory for a minimal dataset root.

    Returns:
        A function(description=..., name='dataset') creating the root with a
        dataset_description.json (skipped when description is None).
    """
    def _make(description=None, name='dataset', with_description=True) -> Path:
        root = tmp_path / name
        root.mkdir()
        if with_description:
            if description is None:
                description = {"Name": "Test Dataset", "BIDSVersion": "1.8.0"}
            write_json(root / "dataset_description.json", description)
        return root

    return _make


@pytest.fixture
def session_dir(make_dataset) -> Path:
    """
    A dataset with one subject/session directory.

    Returns:
        Path to <root>/sub-01/ses-01 (the root is its grandparent).
    """
    root = make_dataset()
    path = root / "sub-01" / "ses-01"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def multimodal_dataset(make_dataset) -> Path:
    """
    A dataset with two subjects, two sessions each, and several modalities.

    Returns:
        Path to the dataset root.
    """
    root = make_dataset({
        "Name": "Multimodal Dataset",
        "BIDSVersion": "1.8.0",
        "Authors": ["Test Author"]
    })

    write_tsv(root / "participants.tsv", ["participant_id", "age", "sex"],
              [["sub-01", "25", "M"], ["sub-02", "30", "F"]])
    write_json(root / "participants.json", {"age": {"Description": "Age in years"}})
    write_json(root / "task-rest_bold.json", {"RepetitionTime": 2.0})

    for sub in ("sub-01", "sub-02"):
        for ses in ("ses-pre", "ses-post"):
            base = root / sub / ses
            prefix = f"{sub}_{ses}"
            touch(base / "anat" / f"{prefix}_T1w.nii.gz")
            touch(base / "func" / f"{prefix}_task-rest_bold.nii.gz")
            write_tsv(base / "func" / f"{prefix}_task-rest_events.tsv",
                      ["onset", "duration", "trial_type"],
                      [["0.0", "1.0", "go"], ["2.5", "1.0", "stop"]])
            touch(base / "fmap" / f"{prefix}_phasediff.nii.gz")
            touch(base / "fmap" / f"{prefix}_magnitude1.nii.gz")
            touch(base / "fmap" / f"{prefix}_magnitude2.nii.gz")
            touch(base / "eeg" / f"{prefix}_task-rest_eeg.vhdr")
            touch(base / "eeg" / f"{prefix}_task-rest_eeg.vmrk")
            touch(base / "eeg" / f"{prefix}_task-rest_eeg.eeg")

    return root
