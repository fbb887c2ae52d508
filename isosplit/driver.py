# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
isosplit driver: read a tree dump, filter it per build target, print the result.

	python -m isosplit page.sexp --target browser
	python -m isosplit page.sexp --targets server,browser,worker --json

Every failure is reported as a Diagnostic (phases: config, parser, filter);
with --json the driver prints one payload with the exit code, diagnostics and
the filtered dumps keyed by target.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List

from lark.exceptions import UnexpectedInput

from isosplit.core.diagnostics import Diagnostic
from isosplit.core.span import Span
from isosplit.core.targets import BuildTarget, TargetConfigError, TargetVocabulary
from isosplit.filter.target_filter import UnresolvedTargetError, UnsupportedNodeError, process
from isosplit.syntax.printer import format_sexp
from isosplit.syntax.sexp import SexpShapeError, parse_sexp

DEFAULT_TARGET_LIST = "server,browser"


def _diag_to_json(diag: Diagnostic, source: Path) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	return {
		"phase": diag.phase,
		"message": diag.message,
		"severity": diag.severity,
		"file": diag.span.file or str(source),
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
	}


def render_outputs(outputs: Dict[BuildTarget, str]) -> str:
	"""Join filtered dumps; several targets get a `# target:` header each."""
	if len(outputs) == 1:
		(text,) = outputs.values()
		return text + "\n"
	return "".join(f"# target: {target}\n{text}\n" for target, text in outputs.items())


def _report(args: argparse.Namespace, diagnostics: List[Diagnostic], outputs: Dict[BuildTarget, str]) -> int:
	exit_code = 1 if any(d.severity == "error" for d in diagnostics) else 0
	if exit_code == 0 and args.output is not None:
		args.output.write_text(render_outputs(outputs))
	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [_diag_to_json(d, args.source) for d in diagnostics],
			"outputs": outputs if exit_code == 0 else {},
		}
		print(json.dumps(payload))
		return exit_code
	for d in diagnostics:
		print(f"{d.span.file or args.source}:{d.location()}: {d.severity}: {d.message}", file=sys.stderr)
	if exit_code == 0 and args.output is None:
		sys.stdout.write(render_outputs(outputs))
	return exit_code


def main(argv: list[str] | None = None) -> int:
	"""
	Minimal CLI: reads one tree dump, filters it for the requested target (or
	every concrete target of the vocabulary) and prints the filtered dump(s).
	Returns 0 on success and 1 when any diagnostic was reported.
	"""
	parser = argparse.ArgumentParser(description="Split an annotated syntax tree dump into per-target variants")
	parser.add_argument("source", type=Path, help="Path to an s-expression tree dump")
	parser.add_argument(
		"--target",
		type=str,
		default=None,
		help="Build target to filter for (default: every target in --targets)",
	)
	parser.add_argument(
		"--targets",
		type=str,
		default=DEFAULT_TARGET_LIST,
		help=f"Comma separated annotation vocabulary; `anywhere` is implied (default: {DEFAULT_TARGET_LIST})",
	)
	parser.add_argument("-o", "--output", type=Path, help="Write the filtered dump(s) to this path")
	parser.add_argument("--json", action="store_true", help="Emit a JSON payload instead of text")
	args = parser.parse_args(argv)

	try:
		vocabulary = TargetVocabulary.parse(args.targets)
		if args.target is not None:
			targets = [vocabulary.require(args.target)]
		else:
			targets = list(vocabulary.build_targets())
		if not targets:
			raise TargetConfigError("no build target to filter for")
	except TargetConfigError as err:
		return _report(args, [Diagnostic(message=str(err), phase="config")], {})

	try:
		text = args.source.read_text()
	except OSError as err:
		msg = f"cannot read tree dump: {err.strerror or err}"
		return _report(args, [Diagnostic(message=msg, phase="parser", span=Span(file=str(args.source)))], {})

	try:
		tree = parse_sexp(text, file=str(args.source))
	except UnexpectedInput as err:
		span = Span(
			file=str(args.source),
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
			raw=err,
		)
		return _report(args, [Diagnostic(message=str(err), phase="parser", span=span)], {})
	except SexpShapeError as err:
		return _report(args, [Diagnostic(message=str(err), phase="parser", span=err.loc)], {})

	outputs: Dict[BuildTarget, str] = {}
	try:
		for target in targets:
			outputs[target] = format_sexp(process(tree, target, vocabulary))
	except (UnsupportedNodeError, UnresolvedTargetError) as err:
		diag = Diagnostic(
			message=str(err),
			phase="filter",
			span=Span.from_loc(err.loc, file=str(args.source)),
			notes=["internal error: the filter does not support this tree"],
		)
		return _report(args, [diag], {})

	return _report(args, [], outputs)


__all__ = ["main", "render_outputs"]
