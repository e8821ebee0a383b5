class PhaseError(Exception):
    """Base class of the errors raised by a phase."""
    pass


class EmptyPhaseError(PhaseError, ValueError):
    def __init__(self, phase_name):
        super().__init__(f"Phase '{phase_name}' has no species to evaluate.")
        self.phase = phase_name


class SpeciesIndexError(PhaseError, IndexError):
    def __init__(self, index, num_species, phase_name):
        super().__init__(
            f"Species index {index} is out of range for phase '{phase_name}' "
            f"with {num_species} species."
        )
        self.index = index
        self.phase = phase_name


class PhaseConfigurationError(PhaseError, RuntimeError):
    """Use for a phase whose configuration cannot serve the requested evaluation."""

    def __init__(self, message, slot=None, phase=None):
        super().__init__(message)
        self.slot = slot
        self.phase = phase


class MissingFunctionError(PhaseConfigurationError):
    def __init__(self, slot, phase_name):
        super().__init__(
            f"The {slot} function of phase '{phase_name}' has not been set.",
            slot=slot,
            phase=phase_name,
        )


class PhaseFrozenError(PhaseConfigurationError):
    def __init__(self, attribute, phase_name):
        super().__init__(
            f"Cannot set the {attribute} of phase '{phase_name}' after it was frozen.",
            slot=attribute,
            phase=phase_name,
        )
