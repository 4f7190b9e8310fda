"""
adt_saga – lock-safe remote editing of ABAP repository objects.

Import path convention::

    from adt_saga.application.routing import invoke, capabilities
    from adt_saga.application.saga import EditSaga, LockSaga, WorkflowContext
    from adt_saga.kernel.errors import ErrorClassifier, ErrorKind
    from adt_saga.adapters.http import HttpxAdtConnection
    from adt_saga.bootstrap import create_context, load_settings
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
