"""
BIDS entity configuration.

This module holds the entity codes known to the layout, their full names,
and the entities each modality directory permits in its filenames.
"""

# Mapping of BIDS entity codes to full names
# Based on BIDS specification: https://bids-specification.readthedocs.io/
BIDS_ENTITIES = {
    'sub': 'Subject',
    'ses': 'Session',
    'task': 'Task',
    'acq': 'Acquisition',
    'ce': 'Contrast Enhancing Agent',
    'rec': 'Reconstruction',
    'dir': 'Phase-Encoding Direction',
    'run': 'Run',
    'fa': 'Flip Angle',
    'echo': 'Echo',
    'inv': 'Inversion Time',
    'proc': 'Processed (on device)',
    'recording': 'Recording',
    'bval': 'Diffusion Weighting',
    'bvec': 'Diffusion Gradient Directions',
}

# Modality directories in the order the subject assembler scans them
MODALITIES = ('anat', 'func', 'fmap', 'eeg', 'meg', 'beh', 'dwi', 'pet', 'ieeg')

# Entities permitted in the filenames of each modality directory
MODALITY_ENTITIES = {
    'anat': ('sub', 'ses', 'acq', 'ce', 'rec', 'fa', 'echo', 'inv', 'run'),
    'func': ('sub', 'ses', 'task', 'acq', 'rec', 'fa', 'echo', 'inv', 'run', 'recording'),
    'fmap': ('sub', 'ses', 'acq', 'dir', 'run'),
    'eeg': ('sub', 'ses', 'task', 'acq', 'run'),
    'meg': ('sub', 'ses', 'task', 'acq', 'run', 'proc'),
    'beh': ('sub', 'ses', 'task'),
    'dwi': ('sub', 'ses', 'acq', 'run', 'bval', 'bvec'),
    'pet': ('sub', 'ses', 'task', 'acq', 'rec', 'run'),
    'ieeg': ('sub', 'ses', 'task', 'acq', 'run'),
}


def get_entity_full_name(entity_code: str) -> str:
    """
    Get the full name for a BIDS entity code.

    Args:
        entity_code: The BIDS entity code (e.g., 'sub', 'ses', 'task').

    Returns:
        The full name of the entity (e.g., 'Subject', 'Session', 'Task').
        If the entity code is not recognized, returns the code itself.
    """
    return BIDS_ENTITIES.get(entity_code, entity_code)


def get_permitted_entities(modality: str) -> tuple[str, ...]:
    """
    Get the entities permitted in a modality's filenames.

    Raises:
        KeyError: If the modality is not one of MODALITIES.
    """
    return MODALITY_ENTITIES[modality]
