#!/usr/bin/env python3
"""
Resume Rewrite CLI

Scores, analyzes, renders and compiles resumes against a job description.

Commands:
    score    - Keyword-overlap score of a resume against a job description
    analyze  - LLM analysis: match score, suggestions and structured resume
    render   - Render structured resume data (YAML/JSON) to LaTeX
    compile  - Compile structured resume data or a .tex file to PDF
    rewrite  - Analyze, then render and compile the structured resume

Examples:\n

    rewrite_resume.py score resume.txt job.txt                       # Keyword score

    rewrite_resume.py analyze resume.txt job.txt -o analysis.json    # Full analysis

    rewrite_resume.py render analysis.json -o resume.tex             # Render LaTeX

    rewrite_resume.py compile analysis.json -o resume.pdf            # Compile PDF

    rewrite_resume.py rewrite resume.txt job.txt -o resume.pdf --accept-all
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from redraft.contexts.analysis import ResumeAnalyzer
from redraft.contexts.analysis.logger import setup_analysis_logger
from redraft.contexts.rendering import (
    CompilationError,
    check_compiler_installed,
    compile_latex,
    compile_resume,
)
from redraft.contexts.rendering.logger import setup_rendering_logger
from redraft.contexts.scoring import score_keywords
from redraft.contexts.templating import (
    InvalidResumeStructureError,
    ResumeDocument,
    generate_latex,
    load_resume_document,
)
from redraft.utils.llm import UpstreamError, get_provider

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
LATEX_COMPILER = os.getenv("LATEX_COMPILER", "tectonic")


def _session_dir(context_name: str) -> Path:
    return LOGS_PATH / f"{context_name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"


def _read_text_file(path: Path) -> str:
    if not path.exists():
        typer.secho(f"Error: File not found: {path}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return path.read_text(encoding="utf-8")


def _load_document(path: Path) -> ResumeDocument:
    if not path.exists():
        typer.secho(f"Error: File not found: {path}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    try:
        return load_resume_document(path)
    except InvalidResumeStructureError as e:
        typer.secho(f"Error: Invalid resume data in {path}: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _accept_all(document: ResumeDocument) -> int:
    """Accept every bullet that has an improved rewrite. Returns how many were accepted."""
    accepted = 0
    for entry in [*document.experience, *document.projects]:
        for bullet in entry.bullet_points:
            if bullet.improved and not bullet.accepted:
                bullet.accepted = True
                accepted += 1
    return accepted


def _write_pdf(pdf_bytes: bytes, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(pdf_bytes)


def _report_compile_error(error: CompilationError) -> None:
    typer.secho(f"✗ Compilation failed: {error}", fg=typer.colors.RED, bold=True)
    tail = error.tail(10)
    if tail:
        typer.echo("\nCompiler output (last lines):")
        for line in tail:
            typer.echo(f"  {line}")
    typer.echo("")


app = typer.Typer(
    help="Score, analyze, render and compile resumes against a job description",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("score")
def score_command(
    resume_file: Annotated[Path, typer.Argument(help="Plain-text resume")],
    job_file: Annotated[Path, typer.Argument(help="Plain-text job description")],
    show_keywords: Annotated[
        bool,
        typer.Option("--keywords", "-k", help="List matched and missing keywords"),
    ] = False,
):
    """
    Score keyword overlap between a resume and a job description.

    Examples:\n

        $ rewrite_resume.py score resume.txt job.txt

        $ rewrite_resume.py score resume.txt job.txt --keywords
    """
    report = score_keywords(_read_text_file(resume_file), _read_text_file(job_file))

    typer.secho(f"\nKeyword score: {report.score:.2f}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"  Matched: {len(report.matched_keywords)}/{len(report.jd_keywords)} JD keywords")

    if show_keywords:
        typer.echo(f"\nMatched: {', '.join(report.matched_keywords) or 'None'}")
        typer.secho(f"Missing: {', '.join(report.missing_keywords) or 'None'}", fg=typer.colors.YELLOW)
    typer.echo("")


@app.command("analyze")
def analyze_command(
    resume_file: Annotated[Path, typer.Argument(help="Plain-text resume")],
    job_file: Annotated[Path, typer.Argument(help="Plain-text job description")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the analysis result as JSON"),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", "-m", help="Model name (default: GEMINI_MODEL env var)"),
    ] = None,
):
    """
    Analyze a resume against a job description with the LLM.

    Examples:\n

        $ rewrite_resume.py analyze resume.txt job.txt

        $ rewrite_resume.py analyze resume.txt job.txt -o analysis.json
    """
    resume_text = _read_text_file(resume_file)
    job_description = _read_text_file(job_file)

    log_file = setup_analysis_logger(_session_dir("analysis"))

    try:
        analyzer = ResumeAnalyzer(get_provider(model=model))
        result = analyzer.analyze(resume_text, job_description)
    except ValueError as e:  # InvalidInputError or missing API key
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except UpstreamError as e:
        typer.secho(f"✗ Analysis failed: {e}\n", fg=typer.colors.RED, bold=True, err=True)
        typer.echo(f"  Log: {log_file}")
        raise typer.Exit(code=1)

    typer.echo("")
    typer.secho(f"✓ Match score: {result.score:.2f}", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Keyword score: {result.keyword_score:.2f}")
    typer.echo(f"  Suggestions: {len(result.suggestions)}")
    for strength in result.analysis.strengths:
        typer.echo(f"  + {strength}")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        typer.echo(f"  Result: {output}")
    typer.echo(f"  Log: {log_file}")
    typer.echo("")


@app.command("render")
def render_command(
    data_file: Annotated[
        Path, typer.Argument(help="Resume data (YAML/JSON) or a saved analysis result")
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write LaTeX here instead of stdout"),
    ] = None,
    accept_all: Annotated[
        bool,
        typer.Option("--accept-all", help="Use every improved bullet instead of the original"),
    ] = False,
):
    """
    Render structured resume data to LaTeX.

    Examples:\n

        $ rewrite_resume.py render resume.yaml

        $ rewrite_resume.py render analysis.json -o resume.tex --accept-all
    """
    document = _load_document(data_file)
    if accept_all:
        _accept_all(document)

    latex = generate_latex(document)

    if output is None:
        typer.echo(latex, nl=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(latex, encoding="utf-8")
    typer.secho(f"✓ LaTeX written to {output}", fg=typer.colors.GREEN)


@app.command("compile")
def compile_command(
    source_file: Annotated[
        Path, typer.Argument(help="Resume data (YAML/JSON), saved analysis result, or .tex file")
    ],
    output: Annotated[Path, typer.Option("--output", "-o", help="PDF output path")] = Path(
        "resume.pdf"
    ),
    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", "-t", help="Seconds before the compiler is killed", min=1),
    ] = None,
    accept_all: Annotated[
        bool,
        typer.Option("--accept-all", help="Use every improved bullet instead of the original"),
    ] = False,
):
    """
    Compile structured resume data (or a .tex file) to PDF.

    Examples:\n

        $ rewrite_resume.py compile resume.yaml -o out/resume.pdf

        $ rewrite_resume.py compile resume.tex --timeout 120
    """
    if not check_compiler_installed():
        typer.secho(f"Error: LaTeX compiler not found: {LATEX_COMPILER}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho(f"\nCompiling: {source_file}", fg=typer.colors.BLUE, bold=True)
    log_file = setup_rendering_logger(_session_dir("render"))

    try:
        if source_file.suffix == ".tex":
            result = compile_latex(_read_text_file(source_file), timeout=timeout)
        else:
            document = _load_document(source_file)
            if accept_all:
                _accept_all(document)
            result = compile_resume(document, timeout=timeout)
    except CompilationError as e:
        _report_compile_error(e)
        typer.echo(f"  Log: {log_file}")
        raise typer.Exit(code=1)

    _write_pdf(result.pdf_bytes, output)
    typer.secho("✓ Compilation succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  PDF: {output} ({result.elapsed_s:.2f}s)")
    typer.echo(f"  Log: {log_file}")
    typer.echo("")


@app.command("rewrite")
def rewrite_command(
    resume_file: Annotated[Path, typer.Argument(help="Plain-text resume")],
    job_file: Annotated[Path, typer.Argument(help="Plain-text job description")],
    output: Annotated[Path, typer.Option("--output", "-o", help="PDF output path")] = Path(
        "resume.pdf"
    ),
    accept_all: Annotated[
        bool,
        typer.Option("--accept-all", help="Use every improved bullet instead of the original"),
    ] = False,
    save_analysis: Annotated[
        Optional[Path],
        typer.Option("--save-analysis", help="Also write the analysis result as JSON"),
    ] = None,
):
    """
    Analyze a resume, then render and compile the structured result.

    Examples:\n

        $ rewrite_resume.py rewrite resume.txt job.txt -o out/resume.pdf

        $ rewrite_resume.py rewrite resume.txt job.txt --accept-all --save-analysis out/a.json
    """
    if not check_compiler_installed():
        typer.secho(f"Error: LaTeX compiler not found: {LATEX_COMPILER}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    resume_text = _read_text_file(resume_file)
    job_description = _read_text_file(job_file)
    log_file = setup_analysis_logger(_session_dir("rewrite"))

    try:
        result = ResumeAnalyzer().analyze(resume_text, job_description)
    except ValueError as e:  # InvalidInputError or missing API key
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except UpstreamError as e:
        typer.secho(f"✗ Analysis failed: {e}\n", fg=typer.colors.RED, bold=True, err=True)
        raise typer.Exit(code=1)

    typer.secho(f"\n✓ Match score: {result.score:.2f}", fg=typer.colors.GREEN, bold=True)

    if save_analysis:
        save_analysis.parent.mkdir(parents=True, exist_ok=True)
        save_analysis.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        typer.echo(f"  Result: {save_analysis}")

    if accept_all:
        typer.echo(f"  Accepted {_accept_all(result.resume_data)} improved bullets")

    try:
        compiled = compile_resume(result.resume_data)
    except CompilationError as e:
        _report_compile_error(e)
        typer.echo(f"  Log: {log_file}")
        raise typer.Exit(code=1)

    _write_pdf(compiled.pdf_bytes, output)
    typer.secho("✓ Compilation succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  PDF: {output}")
    typer.echo(f"  Log: {log_file}")
    typer.echo("")


if __name__ == "__main__":
    app()
