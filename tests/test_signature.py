# Signature check: the only thing standing between the internet and a deploy.
# We assert that:
# a correctly signed body passes
# any single flipped bit in body or signature fails
# missing/empty inputs fail without hashing anything

import hashlib
import hmac

import pytest

import deployhook.signature as sig

BODY = b'{"ref":"refs/heads/main"}'


def test_compute_matches_hmac_sha256():
    expected = "sha256=" + hmac.new(b"s3cr3t", BODY, hashlib.sha256).hexdigest()
    assert sig.compute_signature("s3cr3t", BODY) == expected
    assert sig.compute_signature(b"s3cr3t", BODY) == expected


@pytest.mark.parametrize("body", [BODY, b"x", b"\x00\xff" * 64, "café".encode("utf-8")])
def test_valid_signature_passes(body):
    assert sig.verify_signature("s3cr3t", body, sig.compute_signature("s3cr3t", body))


def test_flipped_body_bit_fails():
    good = sig.compute_signature("s3cr3t", BODY)
    for i in range(len(BODY)):
        for bit in range(8):
            mutated = bytearray(BODY)
            mutated[i] ^= 1 << bit
            assert not sig.verify_signature("s3cr3t", bytes(mutated), good)


def test_flipped_signature_bit_fails():
    good = sig.compute_signature("s3cr3t", BODY).encode("ascii")
    for i in range(len(good)):
        for bit in range(7):  # stay inside ASCII
            mutated = bytearray(good)
            mutated[i] ^= 1 << bit
            assert not sig.verify_signature("s3cr3t", BODY, mutated.decode("ascii"))


def test_other_secret_fails():
    assert not sig.verify_signature("other", BODY, sig.compute_signature("s3cr3t", BODY))


def test_missing_inputs_fail_without_hashing(mocker):
    spy = mocker.patch("deployhook.signature.hmac.new")
    assert not sig.verify_signature("s3cr3t", BODY, "")
    assert not sig.verify_signature("s3cr3t", BODY, None)
    assert not sig.verify_signature("s3cr3t", b"", "sha256=abc")
    assert not sig.verify_signature("", BODY, "sha256=abc")
    spy.assert_not_called()


def test_bare_hex_and_uppercase_rejected():
    good = sig.compute_signature("s3cr3t", BODY)
    assert not sig.verify_signature("s3cr3t", BODY, good[len("sha256="):])
    assert not sig.verify_signature("s3cr3t", BODY, "sha256=" + good[len("sha256="):].upper())


def test_non_ascii_header_rejected():
    assert not sig.verify_signature("s3cr3t", BODY, "sha256=éé")


def test_uses_constant_time_compare(mocker):
    spy = mocker.spy(sig.hmac, "compare_digest")
    sig.verify_signature("s3cr3t", BODY, "sha256=deadbeef")
    spy.assert_called_once()
