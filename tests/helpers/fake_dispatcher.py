"""Dispatcher whose requests resolve only when the test says so."""

from rfi_tracker.pipeline.dispatcher import Completion


class ManualDispatcher:
    """Holds submitted requests until ``resolve`` is called, in any order."""

    def __init__(self):
        self.submitted = []
        self._unresolved = {}
        self._completions = []
        self.started = False

    @property
    def pending(self):
        return len(self._unresolved) + len(self._completions)

    def is_running(self):
        return self.started

    def start(self):
        self.started = True

    def stop(self, timeout=5.0):
        self.started = False

    def submit(self, ticket, fn, *args):
        self.submitted.append(ticket)
        self._unresolved[ticket.seq] = (ticket, fn, args)
        return ticket

    def tickets(self, channel):
        return [t for t in self.submitted if t.channel == channel]

    def resolve(self, ticket):
        """Run one request now and queue its completion."""
        ticket, fn, args = self._unresolved.pop(ticket.seq)
        try:
            self._completions.append(Completion(ticket=ticket, result=fn(*args)))
        except Exception as e:
            self._completions.append(Completion(ticket=ticket, error=e))

    def resolve_all(self):
        for seq in sorted(self._unresolved):
            self.resolve(self._unresolved[seq][0])

    def poll(self, timeout=0.0):
        if not self._completions:
            return None
        return self._completions.pop(0)
