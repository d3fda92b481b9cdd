class BaseRule:
    """
    A rule exposes a metadata block and a `create(context)` entry point
    returning {node kind: callback}. The host calls `create` once per file.
    """

    meta = {
        "name": None,
        "type": "suggestion",
        "description": "",
        "messages": {},
        "schema": {},
    }

    @property
    def name(self):
        return self.meta["name"]

    def create(self, context):
        raise NotImplementedError("create() must be implemented")
