import pytest

from mpcircuit.aes_ctr import AES128CTRCalculator, aes_128_ctr, reverse_bytes
from mpcircuit.circuit_file import BristolFashion
from mpcircuit.execution import plain_execution
from mpcircuit.integer import Integer

NIST_KEY = bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c")
NIST_IV = bytes.fromhex("f0f1f2f3f4f5f6f7f8f9fafbfcfdfeff")
NIST_PLAIN = bytes.fromhex(
    "6bc1bee22e409f96e93d7e117393172a" "ae2d8a571e03ac9c9eb76fac45af8e51"
)
NIST_CIPHER_1 = bytes.fromhex("874d6191b620e3261bef6864990db6ce")
NIST_CIPHER_2 = bytes.fromhex("9806f66b7970fdff8617187bb9fffdff")

KEY = bytes(range(16))
IV = bytes(range(16, 32))
DATA = bytes(range(100, 132))


@pytest.fixture(autouse=True)
def plain():
    with plain_execution():
        yield


def xor_circuit():
    lines = ["128 384", "2 128 128", "1 128"]
    lines += [f"2 1 {i} {128 + i} {256 + i} XOR" for i in range(128)]
    return BristolFashion.parse("\n".join(lines))


def bits_of(data):
    return Integer.from_bytes(8 * len(data), data).bits


def opened(bits):
    return Integer(bits).reveal_bytes()


def xor_bytes(*parts):
    return bytes(x ^ y ^ z for x, y, z in zip(*parts))


def test_nist_vector():
    assert aes_128_ctr(NIST_KEY, NIST_IV, NIST_PLAIN) == NIST_CIPHER_1 + NIST_CIPHER_2


def test_start_chunk_skips_blocks():
    assert aes_128_ctr(NIST_KEY, NIST_IV, NIST_PLAIN[16:], start_chunk=1) == NIST_CIPHER_2


def test_round_trip():
    cipher = aes_128_ctr(KEY, IV, DATA)
    assert aes_128_ctr(KEY, IV, cipher) == DATA


def test_blind_is_keystream():
    stream = aes_128_ctr(KEY, IV, None, len(DATA))
    assert bytes(a ^ b for a, b in zip(stream, DATA)) == aes_128_ctr(KEY, IV, DATA)


def test_length_truncates_data():
    assert aes_128_ctr(KEY, IV, DATA, 5) == aes_128_ctr(KEY, IV, DATA)[:5]


def test_errors():
    with pytest.raises(ValueError):
        aes_128_ctr(KEY, IV)
    with pytest.raises(ValueError):
        aes_128_ctr(KEY[:8], IV, DATA)
    with pytest.raises(ValueError):
        aes_128_ctr(KEY, IV, DATA, len(DATA) + 1)


def test_reverse_bytes_is_involutive_permutation():
    mapped = [reverse_bytes(i) for i in range(128)]
    assert sorted(mapped) == list(range(128))
    assert all(reverse_bytes(reverse_bytes(i)) == i for i in range(128))
    assert reverse_bytes(0) == 120


def test_in_circuit_key_and_iv():
    calc = AES128CTRCalculator(xor_circuit())
    out = calc.encrypt(bits_of(KEY), bits_of(IV), bits_of(DATA[:16]))
    assert len(out) == 128
    assert opened(out) == xor_bytes(DATA[:16], KEY, IV)


def test_in_circuit_counter_offset():
    calc = AES128CTRCalculator(xor_circuit())
    out = calc.encrypt(bits_of(KEY), bits_of(IV), bits_of(DATA[:16]), start_chunk=5)
    counter = (int.from_bytes(IV, "big") + 5).to_bytes(16, "big")
    assert opened(out) == xor_bytes(DATA[:16], KEY, counter)


def test_public_iv_matches_secret_iv():
    calc = AES128CTRCalculator(xor_circuit())
    key_bits = bits_of(KEY)
    public = calc.encrypt(key_bits, IV, bits_of(DATA), start_chunk=3)
    secret = calc.encrypt(key_bits, bits_of(IV), bits_of(DATA), start_chunk=3)
    assert opened(public) == opened(secret)


def test_multiple_blocks_and_key_reuse():
    calc = AES128CTRCalculator(xor_circuit())
    iv_bits = bits_of(IV)
    whole = calc.encrypt(bits_of(KEY), iv_bits, bits_of(DATA))
    second = calc.encrypt(None, iv_bits, bits_of(DATA[16:]), start_chunk=1)
    assert len(whole) == 256
    assert opened(whole)[16:] == opened(second)


def test_partial_block_length():
    calc = AES128CTRCalculator(xor_circuit())
    full = calc.encrypt(bits_of(KEY), bits_of(IV), bits_of(DATA[:16]))
    part = calc.encrypt(None, bits_of(IV), bits_of(DATA[:16]), length=40)
    assert opened(part) == opened(full)[:5]


def test_public_key_matches_plain_aes():
    calc = AES128CTRCalculator(xor_circuit())
    out = calc.encrypt(KEY, IV, bits_of(DATA))
    assert opened(out) == aes_128_ctr(KEY, IV, DATA)


def test_public_key_blind():
    calc = AES128CTRCalculator(xor_circuit())
    out = calc.encrypt(KEY, IV, None, 16, start_chunk=2)
    assert opened(out) == aes_128_ctr(KEY, IV, None, 2, start_chunk=2)


def test_calculator_errors():
    calc = AES128CTRCalculator(xor_circuit())
    with pytest.raises(ValueError):
        calc.encrypt(None, bits_of(IV), bits_of(DATA[:16]))
    with pytest.raises(TypeError):
        calc.encrypt(KEY, bits_of(IV), bits_of(DATA[:16]))
    with pytest.raises(ValueError):
        calc.encrypt(bits_of(KEY), bits_of(IV), bits_of(DATA[:2]), length=64)
    with pytest.raises(ValueError):
        calc.encrypt(bits_of(KEY[:8]), bits_of(IV), bits_of(DATA[:16]))


def test_wrong_circuit_shape_rejected():
    small = BristolFashion.parse("1 3\n2 1 1\n1 1\n2 1 0 1 2 XOR\n")
    with pytest.raises(ValueError):
        AES128CTRCalculator(small)