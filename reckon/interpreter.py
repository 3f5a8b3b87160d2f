"""Orchestration for reckon programs.

Glues the pipeline together (tokenize -> group -> parse -> run) and owns
the suspension protocol of the `input` built-in. A `Session` re-executes
the whole program whenever a value is supplied, replaying every earlier
input and reseeding the backend's random generator, so a resumed run is
indistinguishable from one that had all inputs up front.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .ast import Program
from .backends import Backend, create_backend
from .errors import ErrorInfo, InputRequired, ReckonError
from .grouper import group_tokens
from .parser import interpret
from .runner import ExecutionRecord, Runner
from .tokenizer import tokenize


@dataclass
class RunOptions:
    backend: str = 'bignumber'
    strict: bool = False
    precision: int = 20
    decimal_places: int = 20
    seed: Optional[int] = None
    debug_level: int = 0
    debug_file: str = 'debug.txt'


@dataclass
class RunResult:
    """Outcome of one run.

    `status` is 'ok', 'error' or 'needs_input'. Records produced before an
    error or a suspension are kept.
    """
    status: str
    records: List[ExecutionRecord] = field(default_factory=list)
    error: Optional[ErrorInfo] = None
    prompt: str = ''
    backend: Optional[Backend] = None

    def render(self, record: ExecutionRecord) -> str:
        parts = [item if isinstance(item, str) else self.backend.format(item) for item in record.output]
        return ' '.join(parts)

    def lines(self) -> List[str]:
        out = []
        for record in self.records:
            if record.kind == 'print':
                out.append(self.render(record))
            else:
                out.append(f"{record.source} => {self.render(record)}")
        return out


def parse_program(source: str, strict: bool = False) -> Program:
    tokens = tokenize(source)
    grouped = group_tokens(source, tokens, strict)
    return Program(source, interpret(source, grouped, strict))


class Session:
    """A resumable run of one program."""
    def __init__(self, source: str, options: Optional[RunOptions] = None,
                 program: Optional[Program] = None, inputs: Iterable[str] = ()):
        self.source = program.source if program is not None else source
        self.options = options or RunOptions()
        self.program = program
        self.inputs: List[str] = list(inputs)
        self.seed = self.options.seed if self.options.seed is not None else random.randrange(2 ** 32)

    def run(self) -> RunResult:
        options = self.options
        backend = create_backend(options.backend, precision=options.precision,
                                 decimal_places=options.decimal_places, seed=self.seed)
        pending = iter(self.inputs)

        def provide() -> str:
            try:
                return next(pending)
            except StopIteration:
                raise InputRequired()

        backend.input_provider = provide
        try:
            if self.program is None:
                self.program = parse_program(self.source, options.strict)
        except ReckonError as ex:
            return RunResult('error', [], ex.err, backend=backend)
        runner = Runner(self.source, backend, options.strict, options.debug_level, options.debug_file)
        try:
            runner.run(self.program)
        except ReckonError as ex:
            return RunResult('error', runner.records, ex.err, backend=backend)
        except InputRequired as ex:
            return RunResult('needs_input', runner.records, prompt=ex.prompt, backend=backend)
        return RunResult('ok', runner.records, backend=backend)

    def resume(self, text: str) -> RunResult:
        self.inputs.append(text)
        return self.run()


def run_program(source: str, options: Optional[RunOptions] = None, inputs: Iterable[str] = ()) -> RunResult:
    """Convenience function to parse and run a reckon program from source."""
    return Session(source, options, inputs=inputs).run()
