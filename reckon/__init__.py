# reckon language package
# A small numeric scripting language with pluggable number backends.
from .errors import ErrorInfo, ReckonError
from .interpreter import RunOptions, RunResult, Session, parse_program, run_program
from .runner import ExecutionRecord, Runner

__all__ = [
    'ErrorInfo',
    'ExecutionRecord',
    'ReckonError',
    'RunOptions',
    'RunResult',
    'Runner',
    'Session',
    'parse_program',
    'run_program',
]
