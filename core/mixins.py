from functools import reduce

from core.events import log_event


class EventLoggingMixin:
    """ViewSet mixin that auto-logs create/update/delete as AircraftEvents.

    Class attributes:
        event_category (str): Required, category key for EVENT_CATEGORIES.
        aircraft_field (str): Dot-notation path to resolve the Aircraft FK
            from the instance (default 'aircraft').

    Hooks:
        _event_name(verb, instance): event title, "<Model> <verb>" by default.
        _event_notes(instance): free-text notes stored with the event.
        _save_kwargs(): extra keyword arguments for serializer.save() on create.
    """

    event_category = None  # must be set by subclass
    aircraft_field = 'aircraft'

    def _resolve_aircraft(self, instance):
        """Follow a dotted path to reach the Aircraft instance."""
        try:
            return reduce(getattr, self.aircraft_field.split('.'), instance)
        except AttributeError:
            return None

    def _model_label(self):
        return self.queryset.model._meta.verbose_name.capitalize()

    def _event_name(self, verb, instance):
        return f"{self._model_label()} {verb}"

    def _event_notes(self, instance):
        return ""

    def _save_kwargs(self):
        return {}

    def _log(self, aircraft, name, notes=""):
        if aircraft is None:
            return
        user = self.request.user if hasattr(self, 'request') else None
        log_event(aircraft, self.event_category, name, user=user, notes=notes)

    def perform_create(self, serializer):
        instance = serializer.save(**self._save_kwargs())
        self._log(self._resolve_aircraft(instance), self._event_name('created', instance),
                  self._event_notes(instance))
        return instance

    def perform_update(self, serializer):
        instance = serializer.save()
        self._log(self._resolve_aircraft(instance), self._event_name('updated', instance),
                  self._event_notes(instance))
        return instance

    def perform_destroy(self, instance):
        # Resolve aircraft *before* delete to avoid stale FK
        name = self._event_name('deleted', instance)
        aircraft = self._resolve_aircraft(instance)
        notes = self._event_notes(instance)
        instance.delete()
        self._log(aircraft, name, notes)
