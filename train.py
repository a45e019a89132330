#!/usr/bin/env python3
"""
N-gram Language Model Training Script

Train a smoothed n-gram model on a corpus file (or the Brown corpus) and
score held-out text with terminal output.

Usage:
    python train.py train --corpus data/train.txt --smoothing discount --discount 0.5
    python train.py train --corpus data/train.txt --smoothing additive --vocab data/vocab.txt --test data/test.txt
    python train.py vocab data/train.txt data/vocab.txt --threshold 2
    python train.py score --load model.pkl --test data/test.txt
"""

import argparse
import sys

from smoothlm import LanguageModel, load_config
from smoothlm.corpus import get_brown_categories
from smoothlm.training import (
    configure_logging, evaluate_model_cli, interactive_demo, train_model_cli, vocab_cli
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Train and evaluate smoothed n-gram language models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s train --corpus train.txt --smoothing discount --discount 0.5 --test test.txt
  %(prog)s train --corpus train.txt --smoothing additive --vocab vocab.txt --lam 0.01
  %(prog)s train --categories news fiction --save models/brown.pkl
  %(prog)s vocab train.txt vocab.txt --threshold 2
  %(prog)s score --load models/brown.pkl --test test.txt

Available smoothing methods:
  discount  - Absolute discounting with backoff (bigram)
  additive  - Lidstone add-lambda smoothing (unigram/bigram/trigram)
        """
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='JSON file with model settings'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        help='Logging level (default: INFO)'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    train = subparsers.add_parser('train', help='Train a model')
    train.add_argument('--corpus', type=str, default=None,
                       help='Training corpus, one sentence per line (default: Brown corpus)')
    train.add_argument('-c', '--categories', type=str, nargs='+', default=None,
                       help='Brown corpus categories to use when no corpus is given')
    train.add_argument('-s', '--smoothing', type=str, default=None,
                       choices=['discount', 'additive'],
                       help='Smoothing method (default: discount)')
    train.add_argument('--discount', type=float, default=None,
                       help='Absolute discount (default: 0.75)')
    train.add_argument('--lam', type=float, default=None,
                       help='Additive smoothing lambda (default: 0.01)')
    train.add_argument('--vocab', type=str, default=None,
                       help='Vocabulary list for the additive model')
    train.add_argument('--min-count', type=int, default=None, dest='vocab_threshold',
                       help='Minimum word count when building a vocabulary (default: 2)')
    train.add_argument('--encoding', type=str, default=None,
                       help='Encoding of corpus files (default: utf-8)')
    train.add_argument('--test', type=str, default=None,
                       help='Held-out file to compute perplexity on')
    train.add_argument('--gram', type=int, default=None, choices=[1, 2, 3],
                       help='Scoring order for the additive model (default: every order)')
    train.add_argument('--save', type=str, default=None,
                       help='Path to save the trained model')
    train.add_argument('-i', '--interactive', action='store_true',
                       help='Run interactive demo after training')
    train.add_argument('--list-categories', action='store_true',
                       help='List available Brown corpus categories and exit')

    vocab = subparsers.add_parser('vocab', help='Generate a vocabulary list')
    vocab.add_argument('corpus', type=str, help='Corpus file to count')
    vocab.add_argument('output', type=str, help='File to write the vocabulary to')
    vocab.add_argument('--threshold', type=int, default=None, dest='vocab_threshold',
                       help='Minimum word count (default: 2)')
    vocab.add_argument('--encoding', type=str, default=None,
                       help='Encoding of corpus files (default: utf-8)')

    score = subparsers.add_parser('score', help='Score text with a saved model')
    score.add_argument('--load', type=str, required=True,
                       help='Path to a saved model')
    score.add_argument('--test', type=str, default=None,
                       help='File to compute perplexity on')
    score.add_argument('--gram', type=int, default=None, choices=[1, 2, 3],
                       help='Scoring order for the additive model (default: every order)')
    score.add_argument('--encoding', type=str, default=None,
                       help='Encoding of corpus files (default: utf-8)')
    score.add_argument('-i', '--interactive', action='store_true',
                       help='Score sentences typed at the terminal')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(
            args.config,
            log_level=args.log_level,
            smoothing=getattr(args, 'smoothing', None),
            discount=getattr(args, 'discount', None),
            lam=getattr(args, 'lam', None),
            gram=getattr(args, 'gram', None),
            vocab_threshold=getattr(args, 'vocab_threshold', None),
            encoding=getattr(args, 'encoding', None),
        )
    except (OSError, ValueError) as e:
        parser.error(str(e))

    configure_logging(config.log_level)

    if args.command == 'vocab':
        return vocab_cli(args.corpus, args.output,
                         threshold=config.vocab_threshold, encoding=config.encoding)

    if args.command == 'train' and args.list_categories:
        print("Available Brown corpus categories:")
        for cat in get_brown_categories():
            print(f"  - {cat}")
        return 0

    if args.command == 'score':
        model = LanguageModel.load(args.load)
    else:
        model = train_model_cli(
            config,
            corpus_path=args.corpus,
            vocab_path=args.vocab,
            categories=args.categories,
            save_path=args.save
        )

    orders = config.scoring_orders(model)

    if args.test:
        evaluate_model_cli(model, args.test, encoding=config.encoding, orders=orders)

    if args.interactive:
        interactive_demo(model, orders)

    return 0


if __name__ == '__main__':
    sys.exit(main())
