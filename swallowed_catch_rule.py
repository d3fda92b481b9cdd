import re

from base_rule import BaseRule


_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT_RE = re.compile(r"//[^\n\r]*")


def block_has_only_comments(block, source_code):
    text = source_code.get_text(block) if source_code is not None else None
    if text is None:
        return not block.get("body")

    # Drop the braces.
    inner = text[1:-1].strip()
    if not inner:
        return True

    inner = _BLOCK_COMMENT_RE.sub("", inner)
    inner = _LINE_COMMENT_RE.sub("", inner)
    return not inner.strip()


class NoSwallowedCatchRule(BaseRule):
    """
    Flags catch blocks that are empty or hold nothing but comments.
    """

    meta = {
        "name": "no-swallowed-catch",
        "type": "problem",
        "description": "Forbid empty or comment-only catch blocks that swallow errors.",
        "messages": {
            "noSwallowedCatch": (
                "Do not swallow errors in catch blocks. Handle, log, rethrow, or explicitly justify it."
            ),
        },
        "schema": {},
    }

    def create(self, context):
        source_code = context.source_code

        def check_catch(node):
            body = node.get("body")
            if body is None or body.get("type") != "BlockStatement":
                return

            if body.get("body") and not block_has_only_comments(body, source_code):
                return

            context.report(body, "noSwallowedCatch")

        return {"CatchClause": check_catch}
