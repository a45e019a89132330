"""
N-gram Language Model Web API

A Flask application providing JSON endpoints for training a smoothed
n-gram model and querying probabilities, sentence scores and perplexity.
"""

import logging
import math
import threading
from pathlib import Path
from typing import Dict, List, Optional

from flask import Flask, jsonify, request

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from smoothlm import LanguageModel, LMConfig, create_model, read_vocab
from smoothlm.corpus import RESERVED_TOKENS, build_vocabulary, load_brown_corpus, tokenize
from smoothlm.smoothing import SmoothingMethod


logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['SECRET_KEY'] = 'smoothlm-secret'

# Global state
model: Optional[LanguageModel] = None
model_config: Optional[LMConfig] = None
training_status: Dict = {
    'is_training': False,
    'stage': 'idle',
    'message': '',
    'error': None,
    'stats': None
}
training_lock = threading.Lock()

TABLES = {
    'unigram': 'get_unigram_table',
    'bigram': 'get_bigram_table',
    'trigram': 'get_trigram_table',
    'alpha': 'get_alpha_table',
}


def train_model_async(config: LMConfig, lines: Optional[List[str]] = None,
                      corpus_path: Optional[str] = None,
                      vocabulary: Optional[List[str]] = None,
                      vocab_path: Optional[str] = None,
                      categories: Optional[List[str]] = None):
    """Train a model; run in a background thread by /api/train."""
    global model, model_config, training_status

    try:
        with training_lock:
            training_status['is_training'] = True
            training_status['stage'] = 'loading'
            training_status['message'] = 'Loading corpus...'
            training_status['error'] = None

        if lines is None and corpus_path is None:
            lines, _ = load_brown_corpus(categories=categories)

        vocab = None
        if config.method == SmoothingMethod.ADDITIVE:
            if vocabulary is not None:
                vocab = set(RESERVED_TOKENS) | set(vocabulary)
            elif vocab_path is not None:
                vocab = read_vocab(vocab_path, encoding=config.encoding)
            elif lines is not None:
                vocab = set(RESERVED_TOKENS) | set(
                    build_vocabulary(lines, min_count=config.vocab_threshold))

        new_model = create_model(config, vocab)

        with training_lock:
            training_status['stage'] = 'training'
            training_status['message'] = 'Training model...'

        if lines is not None:
            stats = new_model.train(lines)
        else:
            result = new_model.train_file(corpus_path, encoding=config.encoding)
            if not result.ok:
                raise OSError("; ".join(result.errors))
            stats = result.stats

        model = new_model
        model_config = config

        with training_lock:
            training_status['stage'] = 'complete'
            training_status['message'] = 'Training complete!'
            training_status['stats'] = stats
            training_status['is_training'] = False

    except Exception as e:
        logger.exception("Training failed: %s", e)
        with training_lock:
            training_status['error'] = str(e)
            training_status['is_training'] = False
            training_status['stage'] = 'error'
            training_status['message'] = f'Error: {str(e)}'


def _no_model():
    return jsonify({'error': 'No model trained'}), 400


def _finite(value: float) -> Optional[float]:
    """JSON has no infinities; report them as null."""
    return value if math.isfinite(value) else None


def _request_order(data: Dict) -> Optional[int]:
    order = data.get('order')
    if order is None and model_config is not None:
        order = model_config.scoring_order(model)
    return order


@app.route('/api/train', methods=['POST'])
def api_train():
    """Start model training."""
    with training_lock:
        if training_status['is_training']:
            return jsonify({'error': 'Training already in progress'}), 400

    data = request.json or {}
    try:
        config = LMConfig().override(
            smoothing=data.get('smoothing'),
            discount=data.get('discount'),
            lam=data.get('lam'),
            gram=data.get('gram'),
            vocab_threshold=data.get('min_count'),
        )
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    thread = threading.Thread(
        target=train_model_async,
        args=(config,),
        kwargs={
            'lines': data.get('sentences'),
            'corpus_path': data.get('corpus_path'),
            'vocabulary': data.get('vocabulary'),
            'vocab_path': data.get('vocab_path'),
            'categories': data.get('categories'),
        }
    )
    thread.daemon = True
    thread.start()

    return jsonify({'message': 'Training started'})


@app.route('/api/status')
def api_status():
    """Get training status."""
    with training_lock:
        return jsonify(training_status)


@app.route('/api/model/info')
def api_model_info():
    """Get model information."""
    if model is None:
        return _no_model()

    return jsonify({
        'is_trained': model.is_trained,
        'smoothing': model.method.value,
        'orders': list(model.supported_orders),
        'vocab_size': len(model.vocabulary),
        'stats': model.training_stats
    })


@app.route('/api/probability')
def api_probability():
    """Probability of the last word given the preceding ones."""
    if model is None:
        return _no_model()

    words = tokenize(request.args.get('words', ''))
    try:
        prob = model.probability(*words)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({
        'words': words,
        'probability': prob,
        'log10': _finite(model.log_probability(*words))
    })


@app.route('/api/logprob', methods=['POST'])
def api_logprob():
    """Log10 probability of one sentence."""
    if model is None:
        return _no_model()

    data = request.json or {}
    sentence = tokenize(data.get('sentence', ''))
    try:
        log_prob = model.scorer.log_prob(sentence, _request_order(data))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({
        'formatted': model.format_sentence(sentence),
        'log_prob': _finite(log_prob)
    })


@app.route('/api/perplexity', methods=['POST'])
def api_perplexity():
    """Calculate perplexity for given sentences."""
    if model is None:
        return _no_model()

    data = request.json or {}
    sentences = data.get('sentences', [])

    if not sentences:
        return jsonify({'error': 'No sentences provided'}), 400

    parsed = [tokenize(sent) for sent in sentences]
    try:
        perplexity = model.scorer.perplexity(parsed, _request_order(data))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({
        'perplexity': _finite(perplexity),
        'num_sentences': len(parsed)
    })


@app.route('/api/tables/<name>')
def api_table(name):
    """Human-readable dump of one probability table."""
    if model is None:
        return _no_model()

    getter = getattr(model, TABLES.get(name, ''), None)
    if getter is None:
        return jsonify({'error': f'No {name} table for this model'}), 404

    return jsonify({'name': name, 'table': getter()})


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='N-gram Model Web API')
    parser.add_argument('--host', default='127.0.0.1', help='Host to bind to')
    parser.add_argument('--port', type=int, default=5000, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = parser.parse_args()

    print("\nStarting N-gram Language Model API")
    print(f"   Listening on http://{args.host}:{args.port}\n")

    app.run(host=args.host, port=args.port, debug=args.debug, threaded=True)
