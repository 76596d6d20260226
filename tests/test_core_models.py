"""
Test core domain models.
"""

from pathlib import Path

import pytest

from bidslayout.core.entity_config import (
    MODALITIES,
    get_entity_full_name,
    get_permitted_entities,
)
from bidslayout.core.issues import Issue, Severity, warnings_only
from bidslayout.core.models import (
    BIDSDataset,
    BIDSFile,
    BIDSSubject,
    DiffusionFile,
    FieldmapFile,
    ParticipantsTable,
)


def make_file(filename, modality, **entities):
    return BIDSFile(
        filename=filename,
        path=Path("/data") / filename,
        modality=modality,
        entities={"sub": "01", **entities}
    )


class TestBIDSFile:
    """Test cases for the file records."""

    def test_defaults(self):
        """Test that a bare record has empty entities and metadata."""
        bids_file = BIDSFile(filename="sub-01_T1w.nii.gz", path=Path("/data/sub-01_T1w.nii.gz"))

        assert bids_file.entities == {}
        assert bids_file.metadata == {}
        assert bids_file.modality is None

    def test_fieldmap_defaults(self):
        """Test the extra fields of a fieldmap record."""
        fieldmap = FieldmapFile(filename="sub-01_epi.nii", path=Path("/data/sub-01_epi.nii"))

        assert fieldmap.type == ''
        assert fieldmap.magnitude == []
        assert fieldmap.phase == []

    def test_diffusion_defaults(self):
        """Test that gradient tables are absent by default."""
        dwi = DiffusionFile(filename="sub-01_dwi.nii", path=Path("/data/sub-01_dwi.nii"))

        assert dwi.bval is None
        assert dwi.bvec is None

    def test_structural_equality(self):
        """Test that records with the same content compare equal."""
        assert make_file("sub-01_T1w.nii", "anat") == make_file("sub-01_T1w.nii", "anat")
        assert make_file("sub-01_T1w.nii", "anat") != make_file("sub-01_T2w.nii", "anat")


class TestBIDSSubject:
    """Test cases for BIDSSubject."""

    def test_get_files(self):
        """Test reading one modality list."""
        t1 = make_file("sub-01_T1w.nii", "anat")
        subject = BIDSSubject(name="sub-01", anat=[t1])

        assert subject.get_files("anat") == [t1]
        assert subject.get_files("pet") == []

    def test_get_files_unknown_modality(self):
        """Test that an unknown modality is rejected."""
        with pytest.raises(ValueError):
            BIDSSubject(name="sub-01").get_files("micr")

    def test_all_files_in_scan_order(self):
        """Test that all_files follows the modality order."""
        t1 = make_file("sub-01_T1w.nii", "anat")
        bold = make_file("sub-01_task-rest_bold.nii", "func", task="rest")
        eeg = make_file("sub-01_task-rest_eeg.edf", "eeg", task="rest")
        subject = BIDSSubject(name="sub-01", eeg=[eeg], anat=[t1], func=[bold])

        assert subject.all_files() == [t1, bold, eeg]


class TestBIDSDataset:
    """Test cases for BIDSDataset."""

    @pytest.fixture
    def dataset(self):
        return BIDSDataset(
            root_path=Path("/data"),
            subjects=[
                BIDSSubject(
                    name="sub-01", session="ses-1",
                    anat=[make_file("sub-01_ses-1_T1w.nii", "anat", ses="1")],
                    func=[make_file("sub-01_ses-1_task-rest_bold.nii", "func", ses="1", task="rest")],
                ),
                BIDSSubject(
                    name="sub-01", session="ses-2",
                    func=[make_file("sub-01_ses-2_task-nback_bold.nii", "func", ses="2", task="nback")],
                ),
            ]
        )

    def test_get_subject(self, dataset):
        """Test lookup with and without prefixes."""
        assert dataset.get_subject("sub-01", "ses-2") is dataset.subjects[1]
        assert dataset.get_subject("01", "1") is dataset.subjects[0]
        assert dataset.get_subject("01") is None
        assert dataset.get_subject("02", "1") is None

    def test_iter_files(self, dataset):
        """Test iterating over all files or one modality."""
        assert len(list(dataset.iter_files())) == 3
        assert [f.entities["task"] for f in dataset.iter_files("func")] == ["rest", "nback"]

    def test_get_all_modalities(self, dataset):
        """Test the set of modalities with files."""
        assert dataset.get_all_modalities() == {"anat", "func"}

    def test_get_all_entity_values(self, dataset):
        """Test collecting entity values across subjects."""
        assert dataset.get_all_entity_values("task") == ["nback", "rest"]
        assert dataset.get_all_entity_values("ses") == ["1", "2"]
        assert dataset.get_all_entity_values("run") == []

    def test_empty_entity_values_ignored(self):
        """Test that fieldmap placeholders are not reported as values."""
        fieldmap = FieldmapFile(
            filename="sub-01_phasediff.nii", path=Path("/data/sub-01_phasediff.nii"),
            entities={"sub": "01", "ses": "", "acq": "", "run": ""}
        )
        dataset = BIDSDataset(root_path=Path("/data"), subjects=[BIDSSubject(name="sub-01", fmap=[fieldmap])])

        assert dataset.get_all_entity_values("acq") == []


class TestParticipantsTable:
    """Test cases for ParticipantsTable."""

    def test_row(self):
        """Test reading one participant with or without prefix."""
        table = ParticipantsTable(columns={"participant_id": ["sub-01", "sub-02"], "age": ["25", "30"]})

        assert table.row("02") == {"participant_id": "sub-02", "age": "30"}
        assert table.row("sub-01")["age"] == "25"
        assert table.row("sub-03") == {}

    def test_row_without_id_column(self):
        """Test a table that has no participant_id column."""
        assert ParticipantsTable(columns={"age": ["25"]}).row("01") == {}


class TestEntityConfig:
    """Test cases for the entity configuration."""

    def test_full_names(self):
        """Test entity full names and unknown codes."""
        assert get_entity_full_name("sub") == "Subject"
        assert get_entity_full_name("xyz") == "xyz"

    def test_permitted_entities(self):
        """Test the permitted entities of a few modalities."""
        assert get_permitted_entities("fmap") == ('sub', 'ses', 'acq', 'dir', 'run')
        assert "proc" in get_permitted_entities("meg")
        assert "proc" not in get_permitted_entities("eeg")

    def test_every_modality_configured(self):
        """Test that each modality has a permitted entity set including sub."""
        for modality in MODALITIES:
            assert get_permitted_entities(modality)[0] == "sub"

    def test_unknown_modality(self):
        """Test that an unknown modality has no entity set."""
        with pytest.raises(KeyError):
            get_permitted_entities("micr")


class TestIssue:
    """Test cases for Issue."""

    def test_str_and_dict(self):
        """Test the text and dictionary forms of an issue."""
        issue = Issue(code="BIDS003", severity=Severity.WARNING, message="missing Name field.",
                      file_path="/data/dataset_description.json")

        assert str(issue) == "[BIDS003] WARNING: missing Name field.\n  File: /data/dataset_description.json"
        assert issue.to_dict()["severity"] == "WARNING"

    def test_severity_levels(self):
        """Test the severities an issue can carry."""
        assert [severity.value for severity in Severity] == ["WARNING", "INFO"]

    def test_warnings_only(self):
        """Test filtering issues by severity."""
        warning = Issue(code="BIDS003", severity=Severity.WARNING, message="w")
        info = Issue(code="BIDS005", severity=Severity.INFO, message="i")

        assert warnings_only([warning, info]) == [warning]
