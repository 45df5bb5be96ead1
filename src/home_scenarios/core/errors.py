"""
Exceptions raised while building scenarios.

Build-time errors are programmer errors in a scenario definition. They are
raised synchronously so a scenario is never left partially wired.
"""


class ScenarioBuildError(ValueError):
    """A scenario definition is invalid."""


class UnknownComponentError(ScenarioBuildError):
    """No component is registered under the requested name."""


class UnknownTriggerError(ScenarioBuildError, AttributeError):
    """No registered component provides the requested trigger."""


class UnknownConstraintError(ScenarioBuildError, AttributeError):
    """No registered component provides the requested constraint."""


class UnknownEntityError(ScenarioBuildError):
    """A trigger or constraint names an entity its component does not know."""
