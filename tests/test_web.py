import pytest

from smoothlm import LMConfig
from web import app as web_app


@pytest.fixture
def client():
    web_app.app.config['TESTING'] = True
    return web_app.app.test_client()


@pytest.fixture
def trained(monkeypatch):
    monkeypatch.setattr(web_app, 'model', None)
    web_app.train_model_async(LMConfig(discount=0.1), lines=["a b a", "a b c"])
    yield web_app.model
    web_app.model = None


def test_no_model(client, monkeypatch):
    monkeypatch.setattr(web_app, 'model', None)

    response = client.get('/api/model/info')

    assert response.status_code == 400
    assert response.get_json()['error'] == 'No model trained'


def test_status_after_training(client, trained):
    status = client.get('/api/status').get_json()

    assert status['stage'] == 'complete'
    assert status['stats']['total_words'] == 10


def test_model_info(client, trained):
    info = client.get('/api/model/info').get_json()

    assert info['smoothing'] == 'discount'
    assert info['orders'] == [2]


def test_probability(client, trained):
    data = client.get('/api/probability', query_string={'words': 'a b'}).get_json()

    assert data['probability'] == pytest.approx(0.45)


def test_probability_wrong_arity(client, trained):
    response = client.get('/api/probability', query_string={'words': 'a'})
    assert response.status_code == 400


def test_logprob(client, trained):
    data = client.post('/api/logprob', json={'sentence': 'a b'}).get_json()

    assert data['formatted'] == ['<s>', 'a', 'b', '</s>']
    assert data['log_prob'] == pytest.approx(trained.log_prob(['a', 'b']))


def test_perplexity(client, trained):
    data = client.post('/api/perplexity', json={'sentences': ['a b', 'b a']}).get_json()

    assert data['num_sentences'] == 2
    assert data['perplexity'] == pytest.approx(
        trained.scorer.perplexity([['a', 'b'], ['b', 'a']])
    )


def test_perplexity_invalid_order(client, trained):
    response = client.post('/api/perplexity', json={'sentences': ['a b'], 'order': 3})
    assert response.status_code == 400


def test_tables(client, trained):
    assert client.get('/api/tables/alpha').status_code == 200
    assert client.get('/api/tables/trigram').status_code == 404
    assert client.get('/api/tables/nonsense').status_code == 404


def test_additive_training_with_vocabulary(client, monkeypatch):
    monkeypatch.setattr(web_app, 'model', None)
    config = LMConfig(smoothing='additive', lam=0.01)
    web_app.train_model_async(config, lines=['x y'], vocabulary=['x', 'y'])

    data = client.get('/api/probability', query_string={'words': 'x'}).get_json()
    assert data['probability'] == pytest.approx(0.25)

    table = client.get('/api/tables/trigram').get_json()
    assert "'<s>'" in table['table']


def test_training_failure_sets_error(client, monkeypatch, tmp_path):
    monkeypatch.setattr(web_app, 'model', None)
    web_app.train_model_async(LMConfig(), corpus_path=str(tmp_path / 'missing.txt'))

    status = client.get('/api/status').get_json()
    assert status['stage'] == 'error'
    assert 'missing.txt' in status['error']
    assert web_app.model is None


def test_train_rejects_bad_config(client):
    response = client.post('/api/train', json={'smoothing': 'witten_bell'})
    assert response.status_code == 400


def test_unexpected_training_error_releases_status(client, monkeypatch):
    monkeypatch.setattr(web_app, 'model', None)
    web_app.train_model_async(LMConfig(), lines=["a b", 5])

    status = client.get('/api/status').get_json()
    assert status['is_training'] is False
    assert status['stage'] == 'error'
    assert web_app.model is None

    response = client.post('/api/train', json={'smoothing': 'witten_bell'})
    assert response.get_json()['error'] != 'Training already in progress'


def test_configured_gram_is_default_order(client, monkeypatch):
    monkeypatch.setattr(web_app, 'model', None)
    config = LMConfig(smoothing='additive', gram=2)
    web_app.train_model_async(config, lines=['x y'], vocabulary=['x', 'y'])

    data = client.post('/api/logprob', json={'sentence': 'x y'}).get_json()
    assert data['log_prob'] == pytest.approx(web_app.model.log_prob(['x', 'y'], 2))

    data = client.post('/api/logprob', json={'sentence': 'x y', 'order': 1}).get_json()
    assert data['log_prob'] == pytest.approx(web_app.model.log_prob(['x', 'y'], 1))


def test_additive_without_gram_needs_order(client, monkeypatch):
    monkeypatch.setattr(web_app, 'model', None)
    config = LMConfig(smoothing='additive')
    web_app.train_model_async(config, lines=['x y'], vocabulary=['x', 'y'])

    response = client.post('/api/perplexity', json={'sentences': ['x y']})
    assert response.status_code == 400


def test_zero_probability_is_null(client, monkeypatch):
    monkeypatch.setattr(web_app, 'model', None)
    config = LMConfig(smoothing='additive', gram=1)
    web_app.train_model_async(config, lines=['x y'], vocabulary=['x', 'y'])

    # <UNK> is in the vocabulary but never counted
    response = client.get('/api/probability', query_string={'words': '<UNK>'})
    assert b'Infinity' not in response.data
    data = response.get_json()
    assert data['probability'] == 0.0
    assert data['log10'] is None

    response = client.post('/api/perplexity', json={'sentences': ['z']})
    assert b'Infinity' not in response.data
    assert response.get_json()['perplexity'] is None
