# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# errors.py
# -----------------------------------------------------------------------------
# Purpose:
#   Exception taxonomy for the queueing-network model.
#
# Design notes:
#   - ConfigurationError: anything wrong with the network description or the
#     run configuration; raised before the first event is scheduled.
#   - InternalInvariantViolation: the model reached a state its own logic
#     should make impossible (unknown station, illegal event, routing gap).
#   - ResourceExhaustion: the run would allocate more customers than allowed.
#   - None of these are retried; the CLI maps them to distinct exit codes.
#
# Usage:
#   from qnet.errors import ConfigurationError, IllegalEvent
# -----------------------------------------------------------------------------

from __future__ import annotations


class QnetError(Exception):
    """Base class for every error raised by the model."""
    exit_code = 1


class ConfigurationError(QnetError, ValueError):
    """Malformed network description or run configuration."""
    exit_code = 1

    def __init__(self, message: str, component_id: int | None = None):
        if component_id is not None:
            message = f"component {component_id}: {message}"
        super().__init__(message)
        self.component_id = component_id


class InvalidComponentType(ConfigurationError):
    """A component record carries a type tag other than G, Q or E."""


class InternalInvariantViolation(QnetError, RuntimeError):
    """The model observed a state that indicates a logic defect."""
    exit_code = 4


class IllegalEvent(InternalInvariantViolation):
    """An event references an unknown station or carries an unknown kind."""


class RoutingExhausted(InternalInvariantViolation):
    """The cumulative route probabilities ended below the uniform draw."""


class ResourceExhaustion(QnetError, RuntimeError):
    """Allocating another customer or event record is not possible."""
    exit_code = 3
