import json
import os

from ast_walker import PARENT_FIELD, iter_children, is_node


class LoadTreeError(RuntimeError):
    pass


def link_parents(program):
    """
    Points every node at its parent under the `parent` key. Run once, before
    analysis; the walker never follows these links.
    """
    program[PARENT_FIELD] = None
    stack = [program]
    while stack:
        node = stack.pop()
        for child in iter_children(node):
            child[PARENT_FIELD] = node
            stack.append(child)
    return program


def _sibling_source(filename):
    if not filename.endswith(".json"):
        return None
    candidate = filename[: -len(".json")]
    if os.path.isfile(candidate):
        return candidate
    return None


def _read_text(filename):
    try:
        with open(filename, encoding="utf-8") as handle:
            return handle.read()
    except OSError as exc:
        raise LoadTreeError(f"Could not read source text '{filename}': {exc}") from exc


def load_tree(filename, source_filename=None):
    """
    Loads an ESTree JSON file written by the upstream frontend.

    The file holds either a bare Program or an envelope
    {"program": ..., "sourceText": ..., "bindings": ...}. Returns
    (program, source_text, binding_table); the last two may be None.
    """
    if not os.path.exists(filename):
        raise LoadTreeError(f"Input file does not exist: {filename}")
    if not os.path.isfile(filename):
        raise LoadTreeError(f"Input path is not a file: {filename}")

    try:
        with open(filename, encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        base = os.path.basename(filename)
        raise LoadTreeError(
            f"Could not parse '{base}' as JSON (line {exc.lineno}, column {exc.colno}). "
            "Expected an ESTree Program as written by the parser frontend."
        ) from exc

    program = payload
    source_text = None
    binding_table = None
    if isinstance(payload, dict) and not is_node(payload) and "program" in payload:
        program = payload["program"]
        source_text = payload.get("sourceText")
        binding_table = payload.get("bindings")

    if not is_node(program) or program.get("type") != "Program":
        raise LoadTreeError(f"'{os.path.basename(filename)}' does not hold an ESTree Program node.")

    if source_filename is None and source_text is None:
        source_filename = _sibling_source(filename)
    if source_filename is not None:
        source_text = _read_text(source_filename)

    return link_parents(program), source_text, binding_table
