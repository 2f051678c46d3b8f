import argparse
import asyncio
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown

from doc_analyzer.exception.custom_exception import DocumentAnalyzerException
from doc_analyzer.utils.file_io import format_file_size
from orchestrator.workspace_manager import WorkspaceManager

console = Console()

EXIT_WORDS = ["exit", "quit", "bye"]


class LocalFile:
    """Path-backed stand-in for an uploaded file object."""

    def __init__(self, path: Path):
        self.name = path.name
        self._path = path

    def read(self) -> bytes:
        return self._path.read_bytes()


async def run(paths):
    manager = WorkspaceManager()
    workspace = await manager.create()

    if not workspace.has_api_key:
        console.print("[red]No OpenAI API key found. Set OPENAI_API_KEY or store one via the API.[/red]")
        return 1

    console.print("[bold cyan]Indexing documents...[/bold cyan]")
    try:
        result = await workspace.add_files([LocalFile(p) for p in paths])
    except DocumentAnalyzerException as e:
        console.print(f"[red]Failed to upload and process files. Please try again.[/red] ({e.error_message})")
        return 1

    for f in result.accepted:
        console.print(f"  [green]+[/green] {f.name} ({format_file_size(f.size)})")
    for r in result.rejected:
        console.print(f"  [yellow]-[/yellow] {r['name']}: {r['reason']}")

    if not result.accepted:
        console.print("[red]No supported files to chat about.[/red]")
        return 1

    console.print(f"[green]Indexed {len(result.chunks)} chunks. Chatbot ready.[/green]\n")
    console.print("[bold green]Assistant:[/bold green]")
    console.print(Markdown(workspace.conversation.messages[0].content))

    try:
        while True:
            user_input = console.input("\n[bold magenta]You:[/bold magenta] ").strip()
            if not user_input:
                continue
            if user_input.lower() in EXIT_WORDS:
                console.print("[yellow]Exiting chat. Goodbye![/yellow]")
                break

            reply = await workspace.ask(user_input)

            console.print("\n[bold green]Assistant:[/bold green]")
            console.print(Markdown(reply.content))
            console.print("\n" + "-" * 60)
    finally:
        manager.delete(workspace.session_id)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Chat with your documents from the terminal.")
    parser.add_argument("files", nargs="+", type=Path, help="PDF, DOCX, PPTX, PY or TXT files")
    args = parser.parse_args()

    missing = [p for p in args.files if not p.is_file()]
    if missing:
        parser.error("file not found: " + ", ".join(str(p) for p in missing))

    return asyncio.run(run(args.files))


if __name__ == "__main__":
    raise SystemExit(main())
