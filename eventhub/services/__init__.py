"""Business logic for events and user accounts.

Import services from their modules, e.g.::

    from eventhub.services.event_service import EventService
"""
