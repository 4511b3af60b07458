"""Domain exceptions raised by the RM portfolio services."""

from __future__ import annotations


class RMPortfolioError(Exception):
    """Base class for errors the HTTP layer knows how to translate."""


class NotFoundError(RMPortfolioError):
    """A client or transaction does not exist."""

    def __init__(self, entity: str, identifier: object):
        super().__init__(f"{entity} {identifier} not found")
        self.entity = entity
        self.identifier = identifier


class ValidationError(RMPortfolioError):
    """Input was well-formed but violates a business rule."""


__all__ = ["NotFoundError", "RMPortfolioError", "ValidationError"]
