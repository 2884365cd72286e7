#!/usr/bin/env python3
"""
Metamodel exceptions.

All metamodel exceptions inherit from MetamodelError for easy catching.
Lookup failures are also LookupErrors and construction/editing failures are
also ValueErrors, so callers can use either style.

Firing failures are *not* exceptions: fire() returns a Result with ok=False
and diagnostic flags set.
"""


class MetamodelError(Exception):
    """Base exception for all metamodel errors."""


class UnknownActionError(MetamodelError, LookupError):
    """Action label does not name a transition in the net."""


class UnknownPlaceError(MetamodelError, LookupError):
    """Place label (or offset) not found."""


class UnknownTransitionError(MetamodelError, LookupError):
    """Transition label not found."""


class UnknownSchemaError(MetamodelError, LookupError):
    """No model registered for the event's schema."""


class InvalidArcError(MetamodelError, ValueError):
    """Arc endpoints are both places, both transitions, or missing."""


class UnsupportedOperationError(MetamodelError, ValueError):
    """Operation not allowed for this net type or arc kind."""


class VersionMismatchError(MetamodelError, ValueError):
    """Declaration version differs from the supported version."""


class InvalidDeclarationError(MetamodelError, ValueError):
    """Declaration could not be validated or indexed."""
