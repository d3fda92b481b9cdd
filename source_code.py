import bisect

from ast_walker import node_span


class SourceCode:
    """
    Raw text of the file under analysis. Offsets are the frontend's span
    offsets, used as code-point indices into `text`; frontends that emit
    UTF-16 or UTF-8 byte offsets must convert them first. `text` may be
    None when the host did not supply it.
    """

    def __init__(self, text=None):
        self.text = text
        self._line_starts = None

    def get_text(self, node):
        span = node_span(node)
        if self.text is None or span is None:
            return None
        return self.text[span[0]:span[1]]

    def _offsets(self):
        if self._line_starts is None:
            starts = [0]
            for index, char in enumerate(self.text or ""):
                if char == "\n":
                    starts.append(index + 1)
            self._line_starts = starts
        return self._line_starts

    def location(self, node):
        """1-based line, 0-based column of a node's start, or (None, None)."""
        loc = node.get("loc")
        if isinstance(loc, dict) and isinstance(loc.get("start"), dict):
            start = loc["start"]
            return start.get("line"), start.get("column")

        span = node_span(node)
        if span is None or self.text is None:
            return None, None

        starts = self._offsets()
        line_index = bisect.bisect_right(starts, span[0]) - 1
        return line_index + 1, span[0] - starts[line_index]
