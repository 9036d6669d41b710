import hashlib
import hmac

from apps.webhooks.signature import compute_signature, verify_signature

BODY = b'{"event":"charge.success","data":{"reference":"ref_1001","amount":500000}}'
SECRET = 'sk_test_secret'


class TestComputeSignature:

    def test_matches_hmac_sha512_hex(self):
        expected = hmac.new(SECRET.encode(), BODY, hashlib.sha512).hexdigest()

        assert compute_signature(BODY, SECRET) == expected
        assert len(compute_signature(BODY, SECRET)) == 128

    def test_str_and_bytes_agree(self):
        assert compute_signature(BODY.decode(), SECRET) == compute_signature(BODY, SECRET.encode())


class TestVerifySignature:

    def test_valid_signature(self):
        assert verify_signature(BODY, compute_signature(BODY, SECRET), SECRET) is True

    def test_uppercase_hex_rejected(self):
        assert verify_signature(BODY, compute_signature(BODY, SECRET).upper(), SECRET) is False

    def test_whitespace_padded_signature_rejected(self):
        signature = compute_signature(BODY, SECRET)

        assert verify_signature(BODY, ' ' + signature + '\n', SECRET) is False

    def test_one_byte_change_in_body(self):
        signature = compute_signature(BODY, SECRET)
        tampered = BODY.replace(b'500000', b'500001')

        assert verify_signature(tampered, signature, SECRET) is False

    def test_one_character_change_in_signature(self):
        signature = compute_signature(BODY, SECRET)
        flipped = ('0' if signature[0] != '0' else '1') + signature[1:]

        assert verify_signature(BODY, flipped, SECRET) is False

    def test_wrong_secret(self):
        assert verify_signature(BODY, compute_signature(BODY, 'other'), SECRET) is False

    def test_empty_signature_or_secret(self):
        signature = compute_signature(BODY, SECRET)

        assert verify_signature(BODY, '', SECRET) is False
        assert verify_signature(BODY, None, SECRET) is False
        assert verify_signature(BODY, signature, '') is False

    def test_length_mismatch(self):
        assert verify_signature(BODY, compute_signature(BODY, SECRET)[:-2], SECRET) is False

    def test_non_ascii_signature(self):
        assert verify_signature(BODY, 'é' * 128, SECRET) is False
