"""
Declarative row actions.

Admin list rows carry the names of the actions available for each record.
A client sends back a (record id, action) pair and `dispatch` routes it to
the handler registered for that action.
"""
from .exceptions import UnknownAction


def dispatch(registry, record_id, action, **payload):
    """
    Route one (record id, action) pair.

    Args:
        registry: Dict mapping action name to a handler(record_id, **payload)
        record_id: Target record
        action: Action name
        payload: Extra handler arguments (e.g. reply text)

    Raises:
        UnknownAction: the action is not registered
    """
    handler = registry.get(action)
    if handler is None:
        raise UnknownAction(action, sorted(registry))
    return handler(record_id, **payload)
