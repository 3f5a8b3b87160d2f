"""JSON serialization/deserialization for reckon programs.

This module converts between the token and statement dataclasses and
plain Python dict/list structures suitable for JSON encoding. It supports
a full round-trip for every statement kind; the program's source text is
stored alongside so errors in a reloaded program can still show their
context.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Program,
    Statement,
    SetVariable,
    SetFunction,
    InlineExecution,
    IfStmt,
    ElseIfStmt,
    ElseStmt,
    LoopStmt,
    RepeatUntil,
    RepeatTimes,
    RepeatTimesWith,
    ReturnStmt,
    BreakStmt,
    PrintStmt,
    ThrowStmt,
)
from .tokenizer import Token, GroupToken, CallToken


def token_to_obj(token: Token) -> Dict[str, Any]:
    obj = {"kind": token.type, "value": token.value, "index": token.index, "end": token.end}
    if isinstance(token, GroupToken):
        obj["children"] = [token_to_obj(t) for t in token.children]
        obj["opener"] = token_to_obj(token.opener)
        obj["closer"] = token_to_obj(token.closer)
    if isinstance(token, CallToken):
        obj["name"] = token_to_obj(token.name)
        obj["arguments"] = token_to_obj(token.arguments)
    return obj


def token_from_obj(o: Dict[str, Any]) -> Token:
    base = (o["kind"], o["value"], o["index"], o["end"])
    if "arguments" in o:
        return CallToken(*base, name=token_from_obj(o["name"]), arguments=token_from_obj(o["arguments"]))
    if "children" in o:
        return GroupToken(*base, children=tuple(token_from_obj(t) for t in o["children"]),
                          opener=token_from_obj(o["opener"]), closer=token_from_obj(o["closer"]))
    return Token(*base)


def tokens_to_obj(tokens) -> list:
    return [token_to_obj(t) for t in tokens]


def tokens_from_obj(o) -> tuple:
    return tuple(token_from_obj(t) for t in o)


def ast_to_obj(node: Any) -> Any:
    if isinstance(node, Program):
        return {"type": "Program", "source": node.source, "body": [ast_to_obj(n) for n in node.body]}
    if not isinstance(node, Statement):
        raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")

    obj: Dict[str, Any] = {"type": type(node).__name__, "source": node.source,
                           "index": node.index, "end": node.end}
    if isinstance(node, SetVariable):
        obj.update(name=token_to_obj(node.name), value=tokens_to_obj(node.value), new=node.new,
                   constant=node.constant, value_source=node.value_source)
    elif isinstance(node, SetFunction):
        obj.update(name=token_to_obj(node.name), parameters=list(node.parameters),
                   value=tokens_to_obj(node.value), value_source=node.value_source)
    elif isinstance(node, InlineExecution):
        obj.update(value=tokens_to_obj(node.value))
    elif isinstance(node, (IfStmt, ElseIfStmt, RepeatUntil)):
        obj.update(keyword=token_to_obj(node.keyword), condition=tokens_to_obj(node.condition),
                   body=[ast_to_obj(s) for s in node.body], condition_source=node.condition_source)
    elif isinstance(node, (ElseStmt, LoopStmt)):
        obj.update(keyword=token_to_obj(node.keyword), body=[ast_to_obj(s) for s in node.body])
    elif isinstance(node, (RepeatTimes, RepeatTimesWith)):
        obj.update(keyword=token_to_obj(node.keyword), amount=tokens_to_obj(node.amount),
                   body=[ast_to_obj(s) for s in node.body], amount_source=node.amount_source)
        if isinstance(node, RepeatTimesWith):
            obj["variable"] = token_to_obj(node.variable)
    elif isinstance(node, ReturnStmt):
        obj.update(keyword=token_to_obj(node.keyword), value=tokens_to_obj(node.value))
    elif isinstance(node, BreakStmt):
        obj.update(keyword=token_to_obj(node.keyword))
    elif isinstance(node, (PrintStmt, ThrowStmt)):
        obj.update(keyword=token_to_obj(node.keyword), text=node.text)
    else:
        raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")
    return obj


def ast_from_obj(obj: Any) -> Any:
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(source=obj["source"], body=tuple(ast_from_obj(n) for n in obj["body"]))

    span = (obj["source"], obj["index"], obj["end"])
    if t == "SetVariable":
        return SetVariable(*span, name=token_from_obj(obj["name"]), value=tokens_from_obj(obj["value"]),
                           new=bool(obj.get("new", False)), constant=bool(obj.get("constant", False)),
                           value_source=obj.get("value_source", ""))
    if t == "SetFunction":
        return SetFunction(*span, name=token_from_obj(obj["name"]), parameters=tuple(obj["parameters"]),
                           value=tokens_from_obj(obj["value"]), value_source=obj.get("value_source", ""))
    if t == "InlineExecution":
        return InlineExecution(*span, value=tokens_from_obj(obj["value"]))
    if t in ("IfStmt", "ElseIfStmt", "RepeatUntil"):
        node = {"IfStmt": IfStmt, "ElseIfStmt": ElseIfStmt, "RepeatUntil": RepeatUntil}[t]
        return node(*span, keyword=token_from_obj(obj["keyword"]), condition=tokens_from_obj(obj["condition"]),
                    body=tuple(ast_from_obj(s) for s in obj["body"]),
                    condition_source=obj.get("condition_source", ""))
    if t in ("ElseStmt", "LoopStmt"):
        node = ElseStmt if t == "ElseStmt" else LoopStmt
        return node(*span, keyword=token_from_obj(obj["keyword"]), body=tuple(ast_from_obj(s) for s in obj["body"]))
    if t == "RepeatTimes":
        return RepeatTimes(*span, keyword=token_from_obj(obj["keyword"]), amount=tokens_from_obj(obj["amount"]),
                           body=tuple(ast_from_obj(s) for s in obj["body"]),
                           amount_source=obj.get("amount_source", ""))
    if t == "RepeatTimesWith":
        return RepeatTimesWith(*span, keyword=token_from_obj(obj["keyword"]), amount=tokens_from_obj(obj["amount"]),
                               variable=token_from_obj(obj["variable"]),
                               body=tuple(ast_from_obj(s) for s in obj["body"]),
                               amount_source=obj.get("amount_source", ""))
    if t == "ReturnStmt":
        return ReturnStmt(*span, keyword=token_from_obj(obj["keyword"]), value=tokens_from_obj(obj["value"]))
    if t == "BreakStmt":
        return BreakStmt(*span, keyword=token_from_obj(obj["keyword"]))
    if t == "PrintStmt":
        return PrintStmt(*span, keyword=token_from_obj(obj["keyword"]), text=obj["text"])
    if t == "ThrowStmt":
        return ThrowStmt(*span, keyword=token_from_obj(obj["keyword"]), text=obj["text"])

    raise ValueError(f"Unknown AST node type: {t}")
