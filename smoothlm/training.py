"""
Training Module with Rich Terminal UI

This module provides training, evaluation and vocabulary commands with
terminal progress bars and status displays using the Rich library.
"""

import logging
from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .config import LMConfig, create_model
from .corpus import (
    RESERVED_TOKENS, build_vocabulary, generate_vocab, load_brown_corpus,
    read_lines, read_vocab, tokenize
)
from .model import LanguageModel
from .smoothing import SmoothingMethod


console = Console()
logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Route library log records through the Rich console."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def create_stats_table(stats: Dict) -> Table:
    """Create a Rich table displaying statistics."""
    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="green")
    table.add_column("Value", style="yellow", justify="right")

    for key, value in stats.items():
        display_key = key.replace('_', ' ').title()

        if isinstance(value, float):
            display_value = f"{value:,.4f}"
        elif isinstance(value, int):
            display_value = f"{value:,}"
        elif isinstance(value, list):
            display_value = f"{len(value)} items"
        else:
            display_value = str(value)

        table.add_row(display_key, display_value)

    return table


def _config_table(config: LMConfig, source: str) -> Table:
    config_table = Table(box=box.SIMPLE, show_header=False)
    config_table.add_column("Setting", style="cyan")
    config_table.add_column("Value", style="white")
    config_table.add_row("Smoothing Method", config.smoothing)
    if config.method == SmoothingMethod.DISCOUNT:
        config_table.add_row("Discount", str(config.discount))
    else:
        config_table.add_row("Lambda", str(config.lam))
    config_table.add_row("Corpus", source)
    config_table.add_row("Encoding", config.encoding)
    return config_table


def _additive_vocabulary(config: LMConfig, lines: List[str],
                         vocab_path: Optional[str]) -> set:
    if vocab_path:
        try:
            return read_vocab(vocab_path, encoding=config.encoding)
        except (OSError, UnicodeError) as e:
            logger.error("Could not read vocabulary %s: %s", vocab_path, e)
            return set(RESERVED_TOKENS)

    logger.info("No vocabulary list given; keeping words seen at least %d times",
                config.vocab_threshold)
    return set(RESERVED_TOKENS) | set(build_vocabulary(lines, min_count=config.vocab_threshold))


def train_model_cli(
    config: LMConfig,
    corpus_path: Optional[str] = None,
    vocab_path: Optional[str] = None,
    categories: Optional[List[str]] = None,
    save_path: Optional[str] = None
) -> LanguageModel:
    """
    Train a model with terminal output.

    Args:
        config: Model settings
        corpus_path: Training corpus file; the Brown corpus is used when None
        vocab_path: Vocabulary list for the additive model
        categories: Brown corpus categories to use
        save_path: Path to save the trained model

    Returns:
        Trained model
    """
    source = corpus_path or f"Brown ({', '.join(categories) if categories else 'all'})"

    console.print()
    console.print(Panel.fit(
        "[bold blue]N-gram Language Model Training[/bold blue]",
        border_style="blue"
    ))
    console.print()
    console.print(Panel(_config_table(config, source),
                        title="[bold]Configuration[/bold]", border_style="green"))
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console
    ) as progress:

        task = progress.add_task("[cyan]Loading corpus...", total=None)
        if corpus_path:
            try:
                lines = list(read_lines(corpus_path, encoding=config.encoding))
            except (OSError, UnicodeError) as e:
                logger.error("Could not read training corpus %s: %s", corpus_path, e)
                lines = []
        else:
            lines, corpus_stats = load_brown_corpus(categories=categories)
            logger.info("Loaded %d Brown sentences (%d tokens)",
                        corpus_stats['num_sentences'], corpus_stats['total_tokens'])
        progress.remove_task(task)

        vocabulary = None
        if config.method == SmoothingMethod.ADDITIVE:
            vocabulary = _additive_vocabulary(config, lines, vocab_path)

        model = create_model(config, vocabulary)

        train_task = progress.add_task("[cyan]Counting n-grams...", total=None)

        def update_progress(done):
            progress.update(train_task, description=f"[cyan]Counting n-grams: {done:,} lines")

        stats = model.train(lines, progress_callback=update_progress)
        progress.remove_task(train_task)

    console.print("[green]✓[/green] Training complete!")
    console.print()
    console.print(Panel(
        create_stats_table(stats),
        title="[bold]Training Statistics[/bold]",
        border_style="yellow"
    ))

    if save_path:
        console.print()
        with console.status("[cyan]Saving model..."):
            model.save(save_path)
        console.print(f"[green]✓[/green] Model saved to: [bold]{save_path}[/bold]")

    return model


def evaluate_model_cli(model: LanguageModel, test_path: str,
                       encoding: str = "utf-8",
                       orders: Optional[List[int]] = None) -> Dict:
    """
    Evaluate a model on a test file with terminal output.

    Perplexity is reported for each of ``orders``, defaulting to every
    order the model supports.

    Returns:
        Dictionary of evaluation metrics
    """
    console.print()
    console.print(Panel.fit("[bold blue]Model Evaluation[/bold blue]", border_style="blue"))
    console.print()

    results = {}
    with console.status("[cyan]Computing perplexity..."):
        for order in orders or model.supported_orders:
            results[f'perplexity_{order}gram'] = model.scorer.file_perplexity(
                test_path, order, encoding=encoding
            )

    console.print(Panel(
        create_stats_table(results),
        title=f"[bold]Evaluation Results[/bold] ({test_path})",
        border_style="green"
    ))

    return results


def vocab_cli(corpus_path: str, output_path: str, threshold: int = 2,
              encoding: str = "utf-8") -> int:
    """Write a thresholded vocabulary list; returns a process exit code."""
    try:
        with console.status(f"[cyan]Counting words in {corpus_path}..."):
            words = generate_vocab(corpus_path, output_path, threshold=threshold,
                                   encoding=encoding)
    except (OSError, UnicodeError) as e:
        logger.error("Could not generate vocabulary: %s", e)
        return 1

    console.print(f"[green]✓[/green] Wrote {len(words):,} words "
                  f"(count >= {threshold}) to [bold]{output_path}[/bold]")
    return 0


def score_table(model: LanguageModel, sentence: List[str],
                orders: Optional[List[int]] = None) -> Table:
    """Per-order log10 probability of one sentence."""
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan")
    table.add_column("Order", style="green")
    table.add_column("log10 P", style="yellow", justify="right")

    for order in orders or model.supported_orders:
        table.add_row(f"{order}-gram", f"{model.scorer.log_prob(sentence, order):.4f}")
    return table


def interactive_demo(model: LanguageModel, orders: Optional[List[int]] = None):
    """Score sentences typed at the terminal."""
    console.print()
    console.print(Panel.fit(
        "[bold magenta]Interactive Demo[/bold magenta]\n"
        "Enter a sentence to see its log probability.\n"
        "Type 'quit' to exit.",
        border_style="magenta"
    ))
    console.print()

    while True:
        try:
            user_input = console.input("[bold cyan]Enter sentence:[/bold cyan] ")

            if user_input.lower() in ('quit', 'exit', 'q'):
                break

            sentence = tokenize(user_input)
            console.print(f"[yellow]Formatted:[/yellow] {' '.join(model.format_sentence(sentence))}")
            console.print(score_table(model, sentence, orders))

        except KeyboardInterrupt:
            break

    console.print("\n[yellow]Goodbye![/yellow]")

