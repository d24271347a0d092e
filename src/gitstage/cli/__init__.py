"""gitstage CLI: stage edits against a bare git repository and commit them."""

from ._helpers import main  # noqa: F401

# Import command modules to register Click commands with the main group.
from . import _commands  # noqa: F401
