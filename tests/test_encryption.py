# Tests for envelope encryption
#
# Coverage:
#   - Round trip in GCM (default) and CBC (legacy) modes
#   - Fresh salt/IV per call, envelope layout iv(16) + salt(16) + ciphertext
#   - Wrong secret and tampered data collapse to DecryptionFailure
#   - Short buffers raise MalformedEnvelope
#   - Storage encoding helpers and the registration secret policy

import os

import pytest

from securevault.vault.encryption import (
    DEFAULT_ITERATIONS,
    HEADER_LENGTH,
    IV_LENGTH,
    KEY_LENGTH,
    MODE_CBC,
    SALT_LENGTH,
    EnvelopeCipher,
    decode_from_storage,
    encode_for_storage,
    split_envelope,
    validate_handle,
    validate_secret_strength,
)
from securevault.vault.errors import DecryptionFailure, ErrorKind, MalformedEnvelope

FAST_ITERATIONS = 1_000


@pytest.fixture
def cbc_cipher():
    return EnvelopeCipher(iterations=FAST_ITERATIONS, mode=MODE_CBC)


class TestRoundTrip:
    @pytest.mark.parametrize("plaintext", [b"p@ss", b"", "päss wörd ✓".encode("utf-8"), os.urandom(300)])
    def test_gcm_round_trip(self, cipher, plaintext):
        envelope = cipher.encrypt(plaintext, "M1-master-Secret!")
        assert cipher.decrypt(envelope, "M1-master-Secret!") == plaintext

    @pytest.mark.parametrize("plaintext", [b"p@ss", b"", b"x" * 16, os.urandom(300)])
    def test_cbc_round_trip(self, cbc_cipher, plaintext):
        envelope = cbc_cipher.encrypt(plaintext, "M1-master-Secret!")
        assert cbc_cipher.decrypt(envelope, "M1-master-Secret!") == plaintext

    def test_decrypt_is_deterministic(self, cipher):
        envelope = cipher.encrypt(b"p@ss", "secret")
        assert cipher.decrypt(envelope, "secret") == cipher.decrypt(envelope, "secret")


class TestFreshness:
    def test_same_inputs_give_different_envelopes(self, cipher):
        first = cipher.encrypt(b"p@ss", "secret")
        second = cipher.encrypt(b"p@ss", "secret")
        assert first != second
        assert cipher.decrypt(first, "secret") == cipher.decrypt(second, "secret") == b"p@ss"

    def test_salt_and_iv_differ_per_call(self, cipher):
        iv1, salt1, _ = split_envelope(cipher.encrypt(b"p@ss", "secret"))
        iv2, salt2, _ = split_envelope(cipher.encrypt(b"p@ss", "secret"))
        assert iv1 != iv2
        assert salt1 != salt2


class TestEnvelopeLayout:
    def test_header_lengths(self):
        assert IV_LENGTH == 16
        assert SALT_LENGTH == 16
        assert HEADER_LENGTH == 32
        assert KEY_LENGTH == 32

    def test_gcm_envelope_carries_tag(self, cipher):
        envelope = cipher.encrypt(b"p@ss", "secret")
        assert len(envelope) == HEADER_LENGTH + len(b"p@ss") + 16

    def test_cbc_envelope_is_block_padded(self, cbc_cipher):
        envelope = cbc_cipher.encrypt(b"p@ss", "secret")
        assert len(envelope) == HEADER_LENGTH + 16
        envelope = cbc_cipher.encrypt(b"x" * 16, "secret")
        assert len(envelope) == HEADER_LENGTH + 32

    def test_salt_sits_after_iv(self, cipher):
        """Key derived from bytes 16..32 decrypts; the layout order is fixed."""
        envelope = cipher.encrypt(b"layout", "secret")
        iv, salt, ciphertext = envelope[:16], envelope[16:32], envelope[32:]
        from cryptography.hazmat.primitives.ciphers.aead import AESGCM

        key = cipher.derive_key("secret", salt)
        assert AESGCM(key).decrypt(iv, ciphertext, None) == b"layout"

    def test_cbc_layout_matches_pbkdf2_aes_cbc(self, cbc_cipher):
        from cryptography.hazmat.primitives import padding
        from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

        envelope = cbc_cipher.encrypt(b"legacy", "secret")
        iv, salt, ciphertext = envelope[:16], envelope[16:32], envelope[32:]
        key = cbc_cipher.derive_key("secret", salt)
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(128).unpadder()
        assert unpadder.update(padded) + unpadder.finalize() == b"legacy"


class TestFailures:
    def test_wrong_secret_fails(self, cipher):
        envelope = cipher.encrypt(b"p@ss", "right-secret")
        with pytest.raises(DecryptionFailure) as info:
            cipher.decrypt(envelope, "wrong-secret")
        assert info.value.kind is ErrorKind.DECRYPTION_FAILURE

    def test_tampered_ciphertext_fails_same_way(self, cipher):
        envelope = bytearray(cipher.encrypt(b"p@ss", "secret"))
        envelope[-1] ^= 0x01
        with pytest.raises(DecryptionFailure) as tampered:
            cipher.decrypt(bytes(envelope), "secret")

        good = cipher.encrypt(b"p@ss", "secret")
        with pytest.raises(DecryptionFailure) as wrong:
            cipher.decrypt(good, "not-the-secret")

        assert type(tampered.value) is type(wrong.value)
        assert str(tampered.value) == str(wrong.value)

    def test_tampered_salt_fails(self, cipher):
        envelope = bytearray(cipher.encrypt(b"p@ss", "secret"))
        envelope[IV_LENGTH] ^= 0xFF
        with pytest.raises(DecryptionFailure):
            cipher.decrypt(bytes(envelope), "secret")

    @pytest.mark.parametrize("length", [0, 1, 16, 31])
    def test_short_buffer_is_malformed(self, cipher, length):
        with pytest.raises(MalformedEnvelope):
            cipher.decrypt(b"\x00" * length, "secret")

    def test_header_only_is_decryption_failure(self, cipher, cbc_cipher):
        with pytest.raises(DecryptionFailure):
            cipher.decrypt(os.urandom(HEADER_LENGTH), "secret")
        with pytest.raises(DecryptionFailure):
            cbc_cipher.decrypt(os.urandom(HEADER_LENGTH), "secret")

    def test_cbc_partial_block_is_decryption_failure(self, cbc_cipher):
        with pytest.raises(DecryptionFailure):
            cbc_cipher.decrypt(os.urandom(HEADER_LENGTH + 5), "secret")

    def test_failure_message_reveals_nothing(self, cipher):
        envelope = cipher.encrypt(b"p@ss", "secret")
        with pytest.raises(DecryptionFailure) as info:
            cipher.decrypt(envelope, "wrong")
        assert info.value.__cause__ is None
        assert "p@ss" not in str(info.value)
        assert "secret" not in str(info.value)

    def test_modes_are_not_interchangeable(self, cipher, cbc_cipher):
        envelope = cbc_cipher.encrypt(b"p@ss", "secret")
        with pytest.raises(DecryptionFailure):
            cipher.decrypt(envelope, "secret")


class TestConstruction:
    def test_default_iterations(self):
        assert EnvelopeCipher().iterations == DEFAULT_ITERATIONS == 65_536

    def test_rejects_unknown_mode(self):
        with pytest.raises(ValueError):
            EnvelopeCipher(mode="ecb")

    def test_rejects_non_positive_iterations(self):
        with pytest.raises(ValueError):
            EnvelopeCipher(iterations=0)

    def test_key_depends_on_salt(self, cipher):
        assert cipher.derive_key("secret", b"a" * 16) != cipher.derive_key("secret", b"b" * 16)
        assert len(cipher.derive_key("secret", b"a" * 16)) == KEY_LENGTH


class TestStorageEncoding:
    def test_encode_decode(self):
        data = os.urandom(48)
        encoded = encode_for_storage(data)
        assert isinstance(encoded, str)
        assert decode_from_storage(encoded) == data

    def test_invalid_base64_is_malformed(self):
        with pytest.raises(MalformedEnvelope):
            decode_from_storage("not base64 !!")


class TestSecretPolicy:
    def test_strong_secret_passes(self):
        assert validate_secret_strength("Str0ng-Secret!") == (True, "")

    @pytest.mark.parametrize("secret, fragment", [
        ("Sh0r!", "at least 8"),
        ("A1!" + "a" * 130, "at most 128"),
        ("ALLUPPER1!", "lowercase"),
        ("alllower1!", "uppercase"),
        ("NoDigits!!", "number"),
        ("NoSpecial12", "special"),
    ])
    def test_weak_secrets_rejected(self, secret, fragment):
        valid, message = validate_secret_strength(secret, "Master secret")
        assert valid is False
        assert fragment in message
        assert message.startswith("Master secret")

    @pytest.mark.parametrize("handle, ok", [
        ("al", False),
        ("ali", True),
        ("a" * 50, True),
        ("a" * 51, False),
        ("  ab  ", False),
    ])
    def test_handle_length(self, handle, ok):
        assert validate_handle(handle)[0] is ok
