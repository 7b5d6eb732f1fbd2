"""
Test suite for signing policy configuration
"""

import json

import pytest

from httpsig_sdk.config import (
    SigningPolicy,
    SigningPolicyConfig,
    SigningPolicyError,
    SIGNING_PROFILES,
    get_signing_profile,
    list_signing_profiles,
    load_signing_config_from_file,
)
from httpsig_sdk.signing import SigningContext, SigningMode


def _context(uri='https://api.example.com/items?id=7', **kwargs):
    return SigningContext('POST', uri, body=b'{}', **kwargs)


class TestSigningPolicy:
    """Test policy parsing and factory construction"""

    def test_default_policy_matches_default_factory(self):
        factory = SigningPolicy().to_factory().set_timestamp_generator(lambda: 100)
        params = factory.build(_context())

        assert params.component_names == ['@method', '@target-uri', 'content-digest']
        assert params.algorithm_identifier == 'ecdsa-p256-sha256'
        assert params.parameters['expires'].value == 115

    def test_from_dict(self):
        policy = SigningPolicy.from_dict({
            'components': ['@method', {'name': '@query-param', 'parameters': {'name': 'id'}}],
            'signing_mode': 'account',
            'add_created': False,
            'expires_lifetime_seconds': 0,
            'optional_headers': ['content-type'],
            'digest_algorithm': None,
        })
        params = policy.to_factory().build(_context(headers={'Content-Type': 'application/json'}))

        assert params.serialize_component_value() == (
            '("@method" "@query-param";name="id" "content-type");alg="hmac-sha256"'
        )

    def test_from_dict_with_profile(self):
        policy = SigningPolicy.from_dict({'profile': 'minimal', 'debug': True})
        assert policy.signing_mode == SigningMode.ACCOUNT.value
        assert policy.digest_algorithm is None
        assert policy.debug is True

    def test_unknown_keys(self):
        with pytest.raises(SigningPolicyError) as exc_info:
            SigningPolicy.from_dict({'algorithm': 'ed25519'})
        assert exc_info.value.code == 'INVALID_FORMAT'

    def test_invalid_values(self):
        for data in [
            {'signing_mode': 'device'},
            {'digest_algorithm': 'md5'},
            {'expires_lifetime_seconds': -1},
            {'components': [{'parameters': {}}]},
            {'components': [{'name': '@query-param', 'parameters': 'id'}]},
        ]:
            with pytest.raises(SigningPolicyError) as exc_info:
                SigningPolicy.from_dict(data)
            assert exc_info.value.code == 'INVALID_FORMAT'

    def test_from_json_parse_error(self):
        with pytest.raises(SigningPolicyError) as exc_info:
            SigningPolicy.from_json('{not json')
        assert exc_info.value.code == 'PARSE_ERROR'

    def test_from_json_requires_object(self):
        with pytest.raises(SigningPolicyError) as exc_info:
            SigningPolicy.from_json('[]')
        assert exc_info.value.code == 'INVALID_FORMAT'

    def test_from_file(self, tmp_path):
        path = tmp_path / 'policy.json'
        path.write_text(json.dumps({'signing_mode': 'account', 'components': ['@path']}))

        policy = SigningPolicy.from_file(path)
        assert policy.components == ['@path']

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(SigningPolicyError) as exc_info:
            SigningPolicy.from_file(tmp_path / 'missing.json')
        assert exc_info.value.code == 'FILE_ERROR'

    def test_to_dict(self):
        data = SigningPolicy(signing_mode='account').to_dict()
        assert data['signing_mode'] == 'account'
        assert SigningPolicy.from_dict(data) == SigningPolicy(signing_mode='account')


class TestSigningProfiles:
    """Test predefined profiles"""

    def test_list_profiles(self):
        assert list_signing_profiles() == ['default', 'account', 'minimal']

    def test_get_profile_returns_copy(self):
        profile = get_signing_profile('default')
        profile.optional_headers.append('x-custom')
        profile.components.append('@path')

        assert 'x-custom' not in SIGNING_PROFILES['default'].optional_headers
        assert '@path' not in SIGNING_PROFILES['default'].components

    def test_unknown_profile(self):
        with pytest.raises(SigningPolicyError) as exc_info:
            get_signing_profile('strict')
        assert exc_info.value.code == 'PROFILE_NOT_FOUND'

    def test_minimal_profile(self):
        params = get_signing_profile('minimal').to_factory().set_timestamp_generator(lambda: 5).build(_context())
        assert params.serialize_component_value() == '("@method" "@target-uri");alg="hmac-sha256";created=5'


class TestSigningPolicyConfig:
    """Test per-host configuration"""

    def setup_method(self):
        """Set up test fixtures"""
        self.config_data = {
            'default': 'account',
            'hosts': {
                'api.example.com': {'profile': 'minimal', 'components': ['@path']},
                'install.example.com': 'default',
            }
        }

    def test_to_message_signing(self):
        registry = SigningPolicyConfig.from_dict(self.config_data).to_message_signing()

        api_uri = 'https://api.example.com/items'
        api_params = registry.build_parameters_for(api_uri, _context(api_uri))
        assert api_params.component_names == ['@path']

        install_factory = registry.factory_for_host('install.example.com')
        assert install_factory.signing_mode is SigningMode.INSTALL

        other_factory = registry.factory_for_host('other.example.com')
        assert other_factory.signing_mode is SigningMode.ACCOUNT

    def test_without_default(self):
        registry = SigningPolicyConfig.from_dict({'hosts': {}}).to_message_signing()
        assert registry.factory_for_host('example.com') is None

    def test_invalid_hosts(self):
        with pytest.raises(SigningPolicyError):
            SigningPolicyConfig.from_dict({'hosts': []})

    def test_load_from_file(self, tmp_path):
        path = tmp_path / 'signing.json'
        path.write_text(json.dumps(self.config_data))

        registry = load_signing_config_from_file(path)
        assert registry.factory_for_host('api.example.com') is not None
