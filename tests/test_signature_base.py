"""
Test suite for the signing context and signature base construction

This module tests derived component resolution, header combination,
content digests and the signature base text for complete requests.
"""

import base64
import hashlib
import logging

import pytest
from unittest.mock import Mock

from httpsig_sdk.signing import (
    CallbackHeaderSink,
    HeaderSink,
    SignatureBaseBuilder,
    SignatureParameters,
    SignatureParametersFactory,
    SigningContext,
    SigningError,
    SigningErrorCodes,
    SignatureDigest,
    TargetUri,
    combine_field_values,
    create_signature_base,
    format_content_digest,
)
from httpsig_sdk.structured_fields import SfItem


class TestSigningContext:
    """Test component value resolution"""

    def setup_method(self):
        """Set up test fixtures"""
        self.context = SigningContext(
            'post',
            'https://api.example.com:8443/v1/resource?b=2&a=1&b=1&q=hello%20world',
            headers={'Content-Type': 'application/json', 'X-Multi': ['  a  ', 'b\r\n  c']},
            body=b'{}'
        )

    def _value(self, identifier, **parameters):
        return self.context.get_component_value(SfItem.string(identifier, parameters))

    def test_derived_components(self):
        assert self._value('@method') == 'POST'
        assert self._value('@authority') == 'api.example.com:8443'
        assert self._value('@scheme') == 'https'
        assert self._value('@target-uri') == 'https://api.example.com:8443/v1/resource?b=2&a=1&b=1&q=hello%20world'
        assert self._value('@path') == '/v1/resource'
        assert self._value('@query') == 'b=2&a=1&b=1&q=hello%20world'
        assert self._value('@request-target') == '/v1/resource?b=2&a=1&b=1&q=hello%20world'

    def test_query_param(self):
        """Single-valued parameters resolve, repeated or absent ones do not"""
        assert self._value('@query-param', name='a') == '1'
        assert self._value('@query-param', name='q') == 'hello world'
        assert self._value('@query-param', name='b') is None
        assert self._value('@query-param', name='missing') is None

    def test_query_param_requires_string_name(self):
        with pytest.raises(SigningError) as exc_info:
            self._value('@query-param')
        assert exc_info.value.code == SigningErrorCodes.INVALID_COMPONENT

        with pytest.raises(SigningError) as exc_info:
            self._value('@query-param', name=5)
        assert exc_info.value.code == SigningErrorCodes.INVALID_COMPONENT

    def test_unknown_derived_component(self):
        with pytest.raises(SigningError) as exc_info:
            self._value('@status')
        assert exc_info.value.code == SigningErrorCodes.UNKNOWN_DERIVED_COMPONENT

    def test_non_string_identifier(self):
        with pytest.raises(SigningError) as exc_info:
            self.context.get_component_value(SfItem.token('method'))
        assert exc_info.value.code == SigningErrorCodes.INVALID_COMPONENT

    def test_header_values(self):
        """Header lookup is case-insensitive and values are combined"""
        assert self._value('content-type') == 'application/json'
        assert self._value('x-multi') == 'a, b c'
        assert self._value('x-absent') is None

    def test_empty_path_and_query(self):
        context = SigningContext('GET', 'http://example.com')
        assert context.get_component_value(SfItem.string('@path')) == '/'
        assert context.get_component_value(SfItem.string('@query')) == ''
        assert context.get_component_value(SfItem.string('@request-target')) == '/'
        assert context.get_component_value(SfItem.string('@authority')) == 'example.com'

    def test_default_port_omitted(self):
        assert TargetUri('https://example.com:443/').authority == 'example.com'
        assert TargetUri('http://example.com:80/').authority == 'example.com'
        assert TargetUri('http://example.com:443/').authority == 'example.com:443'

    def test_ipv6_authority(self):
        assert TargetUri('https://[::1]:8080/x').authority == '[::1]:8080'

    def test_empty_query_keeps_question_mark(self):
        target = TargetUri('https://example.com/p?')
        assert target.query == ''
        assert target.request_target == '/p?'

    def test_relative_uri_rejected(self):
        with pytest.raises(SigningError) as exc_info:
            SigningContext('GET', '/relative/path')
        assert exc_info.value.code == SigningErrorCodes.INVALID_COMPONENT

    def test_string_body_is_encoded(self):
        context = SigningContext('POST', 'https://example.com', body='héllo')
        assert context.body == 'héllo'.encode('utf-8')

    def test_header_writes_reach_sink(self):
        """Writes update the snapshot first and are then forwarded"""
        on_set = Mock()
        on_add = Mock()
        context = SigningContext('GET', 'https://example.com', header_sink=CallbackHeaderSink(on_set, on_add))

        context.set_header('X-One', '1')
        context.add_header('X-Two', '2')
        context.add_header('X-Two', '3')

        on_set.assert_called_once_with('X-One', '1')
        assert on_add.call_count == 2
        assert context.snapshot_headers() == {'x-one': ['1'], 'x-two': ['2', '3']}
        assert context.get_component_value(SfItem.string('x-two')) == '2, 3'

    def test_callback_sink_is_header_sink(self):
        assert isinstance(CallbackHeaderSink(), HeaderSink)

    def test_ensure_content_digest(self):
        body = b'{"hello":"world"}'
        context = SigningContext('POST', 'https://example.com', body=body)
        digest = context.ensure_content_digest('sha-512')

        expected = base64.b64encode(hashlib.sha512(body).digest()).decode('ascii')
        assert digest == f'sha-512=:{expected}:'
        assert context.snapshot_headers()['content-digest'] == [digest]

    def test_ensure_content_digest_empty_body(self):
        """An empty body is available and is digested"""
        context = SigningContext('GET', 'https://example.com', body=b'')
        assert context.ensure_content_digest(SignatureDigest.SHA256) == format_content_digest(SignatureDigest.SHA256, b'')

    def test_ensure_content_digest_without_body(self):
        context = SigningContext('GET', 'https://example.com')
        assert context.ensure_content_digest('sha-256') is None

        with pytest.raises(SigningError) as exc_info:
            context.ensure_content_digest('sha-256', required=True)
        assert exc_info.value.code == SigningErrorCodes.BODY_DIGEST_REQUIRED


class TestFieldValues:
    """Test header value combination"""

    def test_combine_field_values(self):
        assert combine_field_values(['a']) == 'a'
        assert combine_field_values([' a ', ' b ']) == 'a, b'
        assert combine_field_values(['one\r\n two', 'x']) == 'one two, x'
        assert combine_field_values(['']) == ''


class TestSignatureBase:
    """Test signature base construction"""

    def setup_method(self):
        """Set up test fixtures"""
        self.body = b'{"hello":"world"}'
        self.headers = {
            'host': ['api.example.com'],
            'content-type': ['application/json'],
            'approov-token': ['Bearer token'],
        }

        def on_set(name, value):
            self.headers[name.lower()] = [value]

        def on_add(name, value):
            self.headers.setdefault(name.lower(), []).append(value)

        self.context = SigningContext(
            'post',
            'https://api.example.com/v1/resource?b=2&a=1&b=1',
            headers=self.headers,
            body=self.body,
            token_header_name='Approov-Token',
            header_sink=CallbackHeaderSink(on_set, on_add)
        )

    def test_signature_base_for_signed_post(self):
        """Complete signature base for a POST with a body digest"""
        factory = (SignatureParametersFactory()
                   .set_base_parameters(SignatureParameters()
                                        .add_component_identifier('@method')
                                        .add_component_identifier('@target-uri'))
                   .set_use_account_message_signing()
                   .set_add_token_header(True)
                   .add_optional_headers(['content-type'])
                   .set_body_digest_config(SignatureDigest.SHA256.identifier, required=False))

        params = factory.build(self.context)
        signature_base = SignatureBaseBuilder(params, self.context).create_signature_base()

        digest_header = 'sha-256=:' + base64.b64encode(hashlib.sha256(self.body).digest()).decode('ascii') + ':'
        assert self.headers['content-digest'] == [digest_header]
        assert signature_base == '\n'.join([
            '"@method": POST',
            '"@target-uri": https://api.example.com/v1/resource?b=2&a=1&b=1',
            '"approov-token": Bearer token',
            '"content-type": application/json',
            f'"content-digest": {digest_header}',
            '"@signature-params": ("@method" "@target-uri" "approov-token" "content-type" "content-digest");'
            'alg="hmac-sha256"',
        ])

    def test_query_param_component(self):
        params = (SignatureParameters()
                  .add_component_identifier('@method')
                  .add_component_identifier('@query-param', {'name': 'foo'})
                  .set_alg('ecdsa-p256-sha256'))
        context = SigningContext('get', 'https://api.example.com/search?foo=bar&baz=1')

        assert create_signature_base(params, context) == '\n'.join([
            '"@method": GET',
            '"@query-param";name="foo": bar',
            '"@signature-params": ("@method" "@query-param";name="foo");alg="ecdsa-p256-sha256"',
        ])

    def test_default_factory_with_fixed_clock(self):
        factory = SignatureParametersFactory.generate_default_factory().set_timestamp_generator(lambda: 1000)
        context = SigningContext('GET', 'https://example.com/items', headers={'content-length': '0'})
        base = create_signature_base(factory.build(context), context)

        assert base == '\n'.join([
            '"@method": GET',
            '"@target-uri": https://example.com/items',
            '"@signature-params": ("@method" "@target-uri");alg="ecdsa-p256-sha256";created=1000;expires=1015',
        ])

    def test_empty_components(self):
        params = SignatureParameters().set_alg('hmac-sha256')
        assert create_signature_base(params, self.context) == '"@signature-params": ();alg="hmac-sha256"'

    def test_missing_component(self):
        """A missing header fails the whole base"""
        params = SignatureParameters().add_component_identifier('@method').add_component_identifier('x-absent')

        with pytest.raises(SigningError) as exc_info:
            create_signature_base(params, self.context)
        assert exc_info.value.code == SigningErrorCodes.MISSING_COMPONENT

    def test_repeated_query_param_is_missing(self):
        params = SignatureParameters().add_component_identifier('@query-param', {'name': 'b'})

        with pytest.raises(SigningError) as exc_info:
            create_signature_base(params, self.context)
        assert exc_info.value.code == SigningErrorCodes.MISSING_COMPONENT

    def test_no_trailing_newline(self):
        params = SignatureParameters().add_component_identifier('@method')
        base = create_signature_base(params, self.context)
        assert not base.endswith('\n')
        assert base.count('\n') == 1

    def test_debug_logging(self, caplog):
        params = SignatureParameters().add_component_identifier('@method')
        params.debug_mode = True

        with caplog.at_level(logging.DEBUG, logger='httpsig_sdk.signing.base_builder'):
            create_signature_base(params, self.context)

        assert '"@method": POST' in caplog.text
