"""
Test suite for signature parameters and the parameters factory
"""

import time
import uuid

import pytest
from unittest.mock import Mock

from httpsig_sdk.signing import (
    SignatureParameters,
    SignatureParametersFactory,
    SigningContext,
    SigningError,
    SigningErrorCodes,
    SigningMode,
    SignatureDigest,
    DEFAULT_EXPIRES_LIFETIME_SECONDS,
    generate_nonce,
    generate_timestamp,
    normalize_header_name,
)
from httpsig_sdk.structured_fields import SfBareItemType, SfParameters

FIXED_TIME = 1700000000


def _context(method='get', uri='https://api.example.com/v1/resource', headers=None, body=None, **kwargs):
    return SigningContext(method, uri, headers or {}, body, **kwargs)


class TestSigningUtilities:
    """Test utility functions"""

    def test_generate_nonce(self):
        """Test nonce generation"""
        nonce = generate_nonce()
        assert uuid.UUID(nonce).version == 4

        # Generate multiple nonces to ensure uniqueness
        nonces = [generate_nonce() for _ in range(10)]
        assert len(set(nonces)) == 10

    def test_generate_timestamp(self):
        """Test timestamp generation"""
        timestamp = generate_timestamp()
        assert isinstance(timestamp, int)
        assert abs(timestamp - int(time.time())) < 2

    def test_normalize_header_name(self):
        assert normalize_header_name(" Content-Type ") == "content-type"


class TestSignatureParameters:
    """Test component list and metadata handling"""

    def test_serialize_component_value(self):
        """Components and metadata serialize as a parameterised inner list"""
        params = (SignatureParameters()
                  .add_component_identifier('@method')
                  .add_component_identifier('content-type', {'charset': 'utf-8'})
                  .set_alg('hmac-sha256')
                  .set_nonce('nonce123')
                  .set_tag('tagged'))

        assert params.serialize_component_value() == (
            '("@method" "content-type";charset="utf-8");alg="hmac-sha256";nonce="nonce123";tag="tagged"'
        )

    def test_duplicate_component_is_ignored(self):
        params = SignatureParameters()
        params.add_component_identifier('content-type', {'charset': 'utf-8'})
        params.add_component_identifier('content-type', {'charset': 'utf-8'})
        params.add_component_identifier('Content-Type', {'charset': 'utf-8'})

        assert len(params.component_identifiers) == 1

    def test_same_name_different_parameters_is_kept(self):
        params = SignatureParameters()
        params.add_component_identifier('@query-param', {'name': 'a'})
        params.add_component_identifier('@query-param', {'name': 'b'})
        params.add_component_identifier('@query-param')

        assert len(params.component_identifiers) == 3

    def test_header_names_lowercased(self):
        params = SignatureParameters().add_component_identifier('Content-Type').add_component_identifier('@Method')
        assert params.component_names == ['content-type', '@Method']

    def test_component_parameter_strings_stay_strings(self):
        """A parameter value like "1.5" is not reinterpreted as a decimal"""
        params = SignatureParameters().add_component_identifier('@query-param', {'name': '1.5'})
        parameter = params.component_identifiers[0].parameters.get('name')
        assert parameter.type == SfBareItemType.STRING

    def test_component_parameters_accept_sf_parameters(self):
        params = SignatureParameters().add_component_identifier('@query-param', SfParameters({'name': 'a'}))
        params.add_component_identifier('@query-param', {'name': 'a'})

        assert len(params.component_identifiers) == 1
        assert params.serialize_component_value() == '("@query-param";name="a")'

    def test_metadata_order_is_insertion_order(self):
        params = SignatureParameters().add_component_identifier('@method')
        params.set_keyid('key-1').set_created(10).set_expires(20)
        assert params.serialize_component_value() == '("@method");keyid="key-1";created=10;expires=20'

    def test_setting_metadata_twice_replaces_value(self):
        params = SignatureParameters().set_alg('hmac-sha256').set_created(1).set_alg('ecdsa-p256-sha256')
        assert params.serialize_component_value() == '();alg="ecdsa-p256-sha256";created=1'
        assert params.algorithm_identifier == 'ecdsa-p256-sha256'

    def test_empty_parameters(self):
        params = SignatureParameters()
        assert params.serialize_component_value() == '()'
        assert params.algorithm_identifier is None

    def test_copy_is_independent(self):
        original = SignatureParameters().add_component_identifier('@method').set_alg('hmac-sha256')
        clone = original.copy()
        clone.add_component_identifier('@path').set_created(5)

        assert original.component_names == ['@method']
        assert 'created' not in original.parameters

    def test_signature_params_identifier(self):
        assert SignatureParameters().signature_params_identifier().serialize() == '"@signature-params"'

    def test_signature_input_header(self):
        params = SignatureParameters().add_component_identifier('@method').set_alg('hmac-sha256')
        assert params.signature_input_header('account') == 'account=("@method");alg="hmac-sha256"'


class TestSignatureParametersFactory:
    """Test per-request parameter construction"""

    def setup_method(self):
        """Set up test fixtures"""
        self.base = (SignatureParameters()
                     .add_component_identifier('@method')
                     .add_component_identifier('@target-uri'))
        self.clock = Mock(return_value=FIXED_TIME)

    def test_account_algorithm(self):
        factory = SignatureParametersFactory().set_base_parameters(self.base).set_use_account_message_signing()
        params = factory.build(_context())

        assert params.algorithm_identifier == 'hmac-sha256'
        assert factory.signature_label == 'account'

    def test_install_algorithm(self):
        factory = SignatureParametersFactory().set_base_parameters(self.base).set_use_install_message_signing()
        params = factory.build(_context())

        assert params.algorithm_identifier == 'ecdsa-p256-sha256'
        assert factory.signature_label == 'install'

    def test_created_and_expires_use_one_clock_reading(self):
        factory = (SignatureParametersFactory()
                   .set_base_parameters(self.base)
                   .set_add_created(True)
                   .set_expires_lifetime(30)
                   .set_timestamp_generator(self.clock))
        params = factory.build(_context())

        assert params.parameters['created'].value == FIXED_TIME
        assert params.parameters['expires'].value == FIXED_TIME + 30
        self.clock.assert_called_once()
        assert params.serialize_component_value() == (
            f'("@method" "@target-uri");alg="hmac-sha256";created={FIXED_TIME};expires={FIXED_TIME + 30}'
        )

    def test_expires_disabled_by_zero_lifetime(self):
        factory = SignatureParametersFactory().set_base_parameters(self.base).set_expires_lifetime(0)
        assert 'expires' not in factory.build(_context()).parameters

    def test_nonce_generator(self):
        factory = SignatureParametersFactory().set_nonce_generator(lambda: 'abc')
        assert factory.build(_context()).parameters['nonce'].value == 'abc'

    def test_token_header_added_when_present(self):
        factory = SignatureParametersFactory().set_base_parameters(self.base).set_add_token_header(True)
        context = _context(headers={'Approov-Token': 'tok'}, token_header_name='Approov-Token')

        assert factory.build(context).component_names == ['@method', '@target-uri', 'approov-token']

    def test_token_header_skipped_when_absent(self):
        factory = SignatureParametersFactory().set_base_parameters(self.base).set_add_token_header(True)

        assert 'approov-token' not in factory.build(_context(token_header_name='Approov-Token')).component_names
        assert len(factory.build(_context(headers={'approov-token': 'tok'})).component_names) == 2

    def test_optional_headers_in_configured_order(self):
        factory = (SignatureParametersFactory()
                   .set_base_parameters(self.base)
                   .add_optional_headers(['X-B', 'x-a', 'x-missing', 'X-B']))
        context = _context(headers={'x-a': '1', 'x-b': '2'})

        assert factory.optional_headers == ['x-b', 'x-a', 'x-missing']
        assert factory.build(context).component_names == ['@method', '@target-uri', 'x-b', 'x-a']

    def test_header_without_values_is_skipped(self):
        factory = SignatureParametersFactory.generate_default_factory()
        context = _context(headers={'authorization': [], 'content-type': 'text/plain'})
        params = factory.build(context)

        assert not context.has_field('authorization')
        assert 'authorization' not in params.component_names
        assert 'content-type' in params.component_names

    def test_content_length_zero_without_body_is_not_signed(self):
        factory = SignatureParametersFactory.generate_default_factory()
        context = _context(headers={'content-length': '0', 'approov-token': 'Bearer token'},
                           body=b'', token_header_name='Approov-Token')
        params = factory.build(context)

        assert 'content-length' not in params.component_names
        assert '"content-length"' not in params.serialize_component_value()

    def test_content_length_signed_with_body(self):
        factory = SignatureParametersFactory().add_optional_headers(['content-length'])
        context = _context(method='post', headers={'content-length': '0'}, body=b'{}')
        assert 'content-length' in factory.build(context).component_names

    def test_content_length_signed_when_non_zero(self):
        factory = SignatureParametersFactory().add_optional_headers(['content-length'])
        assert 'content-length' in factory.build(_context(headers={'content-length': ' 12 '})).component_names
        assert 'content-length' not in factory.build(_context(headers={'content-length': ' 0 '})).component_names

    def test_body_digest_added_when_body_available(self):
        factory = SignatureParametersFactory().set_body_digest_config('sha-256')
        context = _context(method='post', body=b'hello')
        params = factory.build(context)

        assert params.component_names == ['content-digest']
        assert context.has_field('content-digest')

    def test_body_digest_skipped_without_body(self):
        factory = SignatureParametersFactory().set_body_digest_config(SignatureDigest.SHA256, required=False)
        context = _context(body=None)

        assert factory.build(context).component_names == []
        assert not context.has_field('content-digest')

    def test_required_body_digest_without_body(self):
        factory = SignatureParametersFactory().set_body_digest_config('sha-512', required=True)

        with pytest.raises(SigningError) as exc_info:
            factory.build(_context(body=None))
        assert exc_info.value.code == SigningErrorCodes.BODY_DIGEST_REQUIRED

    def test_unsupported_digest_fails_immediately(self):
        with pytest.raises(SigningError) as exc_info:
            SignatureParametersFactory().set_body_digest_config('md5')
        assert exc_info.value.code == SigningErrorCodes.INVALID_CONFIG

    def test_build_does_not_modify_factory(self):
        """Builds are independent of each other"""
        factory = SignatureParametersFactory().set_base_parameters(self.base).add_optional_headers(['x-a'])

        first = factory.build(_context(headers={'x-a': '1'}))
        second = factory.build(_context())

        assert first.component_names == ['@method', '@target-uri', 'x-a']
        assert second.component_names == ['@method', '@target-uri']
        assert self.base.component_names == ['@method', '@target-uri']

    def test_base_parameters_are_copied(self):
        factory = SignatureParametersFactory().set_base_parameters(self.base)
        self.base.add_component_identifier('@path')
        assert factory.build(_context()).component_names == ['@method', '@target-uri']

    def test_with_signing_mode(self):
        factory = SignatureParametersFactory().set_use_install_message_signing().add_optional_headers(['x-a'])
        account = factory.with_signing_mode(SigningMode.ACCOUNT)
        account.add_optional_headers(['x-b'])

        assert factory.signing_mode is SigningMode.INSTALL
        assert account.signing_mode is SigningMode.ACCOUNT
        assert factory.optional_headers == ['x-a']

    def test_default_factory(self):
        factory = SignatureParametersFactory.generate_default_factory().set_timestamp_generator(self.clock)
        context = _context(
            method='post',
            headers={'Authorization': 'Bearer x', 'Content-Type': 'application/json', 'Approov-Token': 't'},
            body=b'{}',
            token_header_name='Approov-Token'
        )
        params = factory.build(context)

        assert params.component_names == [
            '@method', '@target-uri', 'approov-token', 'authorization', 'content-type', 'content-digest'
        ]
        assert params.algorithm_identifier == 'ecdsa-p256-sha256'
        assert params.parameters['created'].value == FIXED_TIME
        assert params.parameters['expires'].value == FIXED_TIME + DEFAULT_EXPIRES_LIFETIME_SECONDS

    def test_default_factory_override_base(self):
        base = SignatureParameters().add_component_identifier('@path')
        params = SignatureParametersFactory.generate_default_factory(base).build(_context())
        assert params.component_names == ['@path']

    def test_debug_mode_propagates(self):
        params = SignatureParametersFactory().set_debug_mode(True).build(_context())
        assert params.debug_mode is True
