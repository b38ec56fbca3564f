"""Lifecycle controller, state machine and managed instances."""
from euno.lifecycle.controller import IntegrationController, identity_of, parse_identity
from euno.lifecycle.managed import ManagedIntegration
from euno.lifecycle.states import IntegrationLifecycle, LifecycleState, LifecycleTransition

__all__ = [
    "IntegrationController",
    "IntegrationLifecycle",
    "LifecycleState",
    "LifecycleTransition",
    "ManagedIntegration",
    "identity_of",
    "parse_identity",
]
