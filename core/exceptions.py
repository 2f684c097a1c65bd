#!/usr/bin/env python3
"""
Custom exceptions for the service layer and the event cascade.
"""


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class MatchNotFoundException(ServiceException):
    """Raised when a match is not found."""
    pass


class MatchRequestNotFoundException(ServiceException):
    """Raised when a match request is not found."""
    pass


class UserNotFoundException(ServiceException):
    """Raised when a user is not found."""
    pass


class SkillNotFoundException(ServiceException):
    """Raised when a skill is not found."""
    pass


class InvalidMatchTransitionError(ServiceException):
    """Raised when a match lifecycle transition is not allowed from its current status."""

    def __init__(self, match_id: str, current: str, target: str):
        self.match_id = match_id
        self.current = current
        self.target = target
        super().__init__(
            f"Match {match_id} cannot move from '{current}' to '{target}'"
        )


class UnknownEventTypeError(ServiceException):
    """Raised when a stored or delivered event names a type that is not registered."""
    pass


class HandlerRegistrationError(ServiceException):
    """Raised when handler registrations are missing or malformed at startup."""
    pass


class OperationCancelledError(ServiceException):
    """Raised when a request is cancelled before its local transaction commits."""
    pass


class InvalidMatchRequestError(ServiceException):
    """Raised when a match request breaks a business rule (self-request, duplicate)."""
    pass
