"""Custom exceptions for the fitness RPG ledger."""


class FitnessRpgLedgerError(Exception):
    """Base exception for all fitness RPG ledger errors."""

    pass


class ConfigurationError(FitnessRpgLedgerError):
    """Raised when there is a configuration error."""

    pass


class ParsingError(FitnessRpgLedgerError):
    """Raised when a CSV file cannot be read."""

    pass


class StateStoreError(FitnessRpgLedgerError):
    """Raised when the local state snapshot cannot be written."""

    pass


class RemoteStoreError(FitnessRpgLedgerError):
    """Raised when a remote mirror operation fails."""

    pass


class InvariantViolationError(FitnessRpgLedgerError):
    """Raised when a derived value no longer matches its source fields."""

    pass
