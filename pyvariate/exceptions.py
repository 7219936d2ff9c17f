__all__ = ["InvalidDistributionError", "DomainError", "DimensionMismatch"]


class InvalidDistributionError(ValueError):
    """
    The parameters do not describe a valid distribution.
    """


class DomainError(ValueError):
    """
    A quantity was requested outside the parameter region where it is defined.
    """


class DimensionMismatch(ValueError):
    """
    The shape of a value disagrees with the dimension of the distribution.
    """
