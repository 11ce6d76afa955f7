"""Stand-ins for the collaborators a BatchService is wired with."""


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def entities_archived(self, kind, uids):
        self.events.append(("archived", kind, list(uids)))

    def entities_restored(self, kind, uids):
        self.events.append(("restored", kind, list(uids)))

    def entities_updated(self, kind, uids):
        self.events.append(("updated", kind, list(uids)))

    def entities_deleted(self, kind, uids):
        self.events.append(("deleted", kind, list(uids)))


class AllowAll:
    def allowed(self, caller, resource, action):
        return True


class DenyAll:
    def allowed(self, caller, resource, action):
        return False


class Gate:
    def __init__(self, allowed=True):
        self.allowed = allowed

    def deletion_allowed(self):
        return self.allowed
