"""
Unit tests for the request pipeline and middleware helpers.
"""

import pytest
from flask import Flask, g, jsonify
from api.errors import AppError, ErrorKind
from api.middleware import (
    RequestPipeline,
    error_handler_middleware,
    read_json_body,
    require_api_key,
    validate_product_body
)


@pytest.fixture
def bare_app():
    """Minimal Flask app with only the error responder installed."""
    app = Flask(__name__)
    app.config['INCLUDE_ERROR_STACK'] = False
    error_handler_middleware(app)
    return app


class TestRequestPipeline:
    """Test ordered interceptor execution."""

    def test_runs_interceptors_in_order(self, bare_app):
        """Every interceptor runs, in registration order, before the view."""
        calls = []
        pipeline = RequestPipeline([lambda req: calls.append('first')])
        pipeline.use(lambda req: calls.append('second'))
        bare_app.before_request(pipeline)

        @bare_app.route('/ping')
        def ping():
            calls.append('view')
            return 'pong'

        response = bare_app.test_client().get('/ping')

        assert response.status_code == 200
        assert calls == ['first', 'second', 'view']

    def test_short_circuits_on_error(self, bare_app):
        """A raising interceptor stops the chain and the view."""
        calls = []

        def reject(req):
            calls.append('reject')
            raise AppError(ErrorKind.UNAUTHORIZED)

        bare_app.before_request(RequestPipeline([
            lambda req: calls.append('log'),
            reject,
            lambda req: calls.append('never'),
        ]))

        @bare_app.route('/ping')
        def ping():
            calls.append('view')
            return 'pong'

        response = bare_app.test_client().get('/ping')

        assert response.status_code == 401
        assert response.get_json() == {"error": "Unauthorized"}
        assert calls == ['log', 'reject']

    def test_interceptors_property_is_read_only_copy(self):
        """Exposed interceptors are a tuple snapshot."""
        first = lambda req: None
        pipeline = RequestPipeline([first])
        assert pipeline.interceptors == (first,)


class TestRequireApiKey:
    """Test the API key interceptor in isolation."""

    @pytest.fixture
    def guarded_client(self, bare_app):
        bare_app.before_request(RequestPipeline([require_api_key('s3cret', '/api')]))

        @bare_app.route('/api/things')
        def things():
            return jsonify(ok=True)

        @bare_app.route('/apiary')
        def apiary():
            return jsonify(ok=True)

        @bare_app.route('/open')
        def open_route():
            return jsonify(ok=True)

        return bare_app.test_client()

    def test_missing_key(self, guarded_client):
        """No header is rejected."""
        response = guarded_client.get('/api/things')
        assert response.status_code == 401
        assert response.get_json() == {"error": "Invalid or missing API key"}

    def test_wrong_key(self, guarded_client):
        """A wrong key is rejected."""
        assert guarded_client.get('/api/things', headers={'x-api-key': 'nope'}).status_code == 401

    def test_primary_header(self, guarded_client):
        """x-api-key is accepted."""
        assert guarded_client.get('/api/things', headers={'x-api-key': 's3cret'}).status_code == 200

    def test_fallback_header(self, guarded_client):
        """authorization is used when x-api-key is absent."""
        assert guarded_client.get('/api/things', headers={'Authorization': 's3cret'}).status_code == 200

    def test_primary_header_wins(self, guarded_client):
        """A wrong x-api-key is not rescued by a correct authorization."""
        headers = {'x-api-key': 'wrong', 'Authorization': 's3cret'}
        assert guarded_client.get('/api/things', headers=headers).status_code == 401

    def test_non_ascii_key_rejected(self, guarded_client):
        """Non-ASCII header values compare safely and fail."""
        headers = {'x-api-key': 'sécret'.encode('utf-8').decode('latin-1')}
        assert guarded_client.get('/api/things', headers=headers).status_code == 401

    def test_outside_prefix_is_open(self, guarded_client):
        """Paths outside the prefix, including look-alikes, skip the check."""
        assert guarded_client.get('/open').status_code == 200
        assert guarded_client.get('/apiary').status_code == 200


class TestBodyParsing:
    """Test JSON body parsing and the validation decorator."""

    @pytest.fixture
    def body_client(self, bare_app):
        @bare_app.route('/echo', methods=['POST'])
        def echo():
            return jsonify(body=read_json_body())

        @bare_app.route('/products', methods=['POST'])
        @validate_product_body(require_all=False)
        def partial():
            return jsonify(g.product_payload)

        return bare_app.test_client()

    def test_empty_body_is_empty_object(self, body_client):
        """An empty body decodes to {}."""
        assert body_client.post('/echo').get_json() == {"body": {}}

    def test_json_decoded_without_content_type(self, body_client):
        """JSON is decoded even without a JSON content type."""
        response = body_client.post('/echo', data='{"a": 1}')
        assert response.get_json() == {"body": {"a": 1}}

    def test_malformed_json(self, body_client):
        """Malformed JSON is a validation error."""
        response = body_client.post('/echo', data='{"a": ', content_type='application/json')
        assert response.status_code == 400
        assert response.get_json() == {"error": "Request body must be valid JSON"}

    def test_partial_validation_decorator(self, body_client):
        """The decorator honors partial mode and stores the payload."""
        response = body_client.post('/products', json={"price": 3})
        assert response.status_code == 200
        assert response.get_json() == {"price": 3}

        response = body_client.post('/products', json={"price": "3"})
        assert response.status_code == 400
        assert response.get_json()["error"] == "price is required and must be a finite number"

    def test_array_body_rejected(self, body_client):
        """A JSON array is not a product payload."""
        response = body_client.post('/products', json=[1, 2])
        assert response.status_code == 400
        assert response.get_json() == {"error": "Request body must be a JSON object"}

    def test_null_body_is_not_an_object(self, body_client):
        """null parses as JSON and is rejected as a non-object."""
        response = body_client.post('/products', data='null', content_type='application/json')
        assert response.status_code == 400
        assert response.get_json() == {"error": "Request body must be a JSON object"}

        assert body_client.post('/echo', data='null').get_json() == {"body": None}
