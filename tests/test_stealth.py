"""Tests for meta-key derivation, chain profiles and stealth addressing."""

import pytest

from shingru_stealth import (
    APTOS,
    IOTA,
    ORDER,
    G,
    Base58,
    ChainAlreadyRegisteredError,
    ChainProfile,
    Hex,
    InvalidPointError,
    InvalidScalarError,
    InvalidSeedError,
    Scalar,
    UnsupportedChainError,
    available_chains,
    derive_deterministic_meta_keys,
    derive_stealth_private,
    derive_stealth_public,
    generate_ephemeral_key,
    generate_meta_keys,
    get_chain,
    iota_address,
    aptos_address,
    is_own_address,
    register_chain,
)

# Recorded vectors for seed "test-seed".  These pin the HKDF context strings
# and domain salts: if they change, previously derived keys are lost.
GOLDEN = {
    "aptos": {
        "spend_priv": "6cad22f3e7e8f271dc3b8cbb44feac17f93be0398a3944e318ce51d79d11026d",
        "spend_pub": "02b6d3c028a4b3a988110860af1e3c5cd76d9dae222c82851291bca625d7d3adb7",
        "view_priv": "3ca0332dc2421492dbbcf5236c16b364f5401929909b100425b68ee3791a50e2",
        "view_pub": "02a38ee8b6fd1db713ba4fc78dcc7af08f065d40a49a07c3058d378398fa4daff9",
    },
    "iota": {
        "spend_priv": "751df48ba31120727fec25949a5299686d00c336b14bfcfaa759984e14d2158c",
        "spend_pub": "03c404f122d403d197114e457d48eb46714229ddfd5730f442df708058993bd51b",
        "view_priv": "33365b741f73a4ca67136917571a2ea87bf1063bd6fe497be669b0121994b8cc",
        "view_pub": "028de9d17a4637ef71688cee59c88ef37bc2d0702e94e0008ac16aea47e70cdd95",
    },
}

# Stealth vector: "test-seed" Aptos meta keys, ephemeral private key 0x11 * 32.
EPHEMERAL_PRIV = "11" * 32
EPHEMERAL_PUB = "034f355bdcb7cc0af728ef3cceb9615d90684bb5b2ca5f859ab0f0b704075871aa"
STEALTH_PRIV = "3126be78b76aa71176a0041fed5bd4cb2ec25feb25b678cb9eeedaaabd4398fb"
STEALTH_PUB = "02f3876ee6fd0b065243b91121f1dd5202fbda1cedd96869e2ec5b748aa334b47d"
STEALTH_APTOS_ADDRESS = "0xd33e26e5c70c23f827f8db9b083176e52b905f0d86f851a3f8ee3df341a2f8ff"


class TestMetaKeys:
    def test_random_keys_are_consistent(self):
        meta = generate_meta_keys()
        assert meta.spend.public_key == meta.spend.private_key * G
        assert meta.view.public_key == meta.view.private_key * G
        assert meta.spend.private_key != meta.view.private_key

    def test_random_keys_differ_between_calls(self):
        assert generate_meta_keys().spend.public_bytes != generate_meta_keys().spend.public_bytes

    def test_compressed_public_keys(self):
        meta = generate_meta_keys()
        assert len(meta.spend.public_bytes) == 33
        assert len(meta.view.public_bytes) == 33

    def test_repr_hides_private_keys(self):
        meta = generate_meta_keys()
        text = repr(meta) + repr(meta.spend)
        assert meta.spend.private_bytes.hex() not in text
        assert meta.view.private_bytes.hex() not in text
        assert meta.spend_public_b58 in text

    def test_ephemeral_key(self):
        eph = generate_ephemeral_key()
        assert eph.public_key == eph.private_key * G
        assert eph.private_bytes.hex() not in repr(eph)


class TestDeterministicDerivation:
    @pytest.mark.parametrize("chain", ["aptos", "iota"])
    def test_golden_vectors(self, chain):
        meta = derive_deterministic_meta_keys("test-seed", chain)
        golden = GOLDEN[chain]
        assert meta.spend.private_bytes.hex() == golden["spend_priv"]
        assert meta.spend.public_bytes.hex() == golden["spend_pub"]
        assert meta.view.private_bytes.hex() == golden["view_priv"]
        assert meta.view.public_bytes.hex() == golden["view_pub"]

    def test_default_chain_is_aptos(self):
        meta = derive_deterministic_meta_keys("test-seed")
        assert meta.spend.public_bytes.hex() == GOLDEN["aptos"]["spend_pub"]

    def test_stable(self):
        a = derive_deterministic_meta_keys("0xsignature-abc")
        b = derive_deterministic_meta_keys("0xsignature-abc")
        assert a.spend.private_bytes == b.spend.private_bytes
        assert a.view.private_bytes == b.view.private_bytes
        assert a.spend.public_bytes == b.spend.public_bytes
        assert a.view.public_bytes == b.view.public_bytes

    def test_different_seeds_differ(self):
        a = derive_deterministic_meta_keys("seed-one")
        b = derive_deterministic_meta_keys("seed-two")
        assert a.spend.public_bytes != b.spend.public_bytes
        assert a.view.public_bytes != b.view.public_bytes

    def test_spend_and_view_independent(self):
        meta = derive_deterministic_meta_keys("test-seed")
        assert meta.spend.private_key != meta.view.private_key

    def test_bytes_seed_matches_utf8(self):
        a = derive_deterministic_meta_keys("test-seed")
        b = derive_deterministic_meta_keys(b"test-seed")
        assert a.spend.public_bytes == b.spend.public_bytes
        assert a.seed == "test-seed"
        assert b.seed is None

    def test_chains_are_domain_separated(self):
        a = derive_deterministic_meta_keys("test-seed", "aptos")
        b = derive_deterministic_meta_keys("test-seed", "iota")
        assert a.spend.public_bytes != b.spend.public_bytes

    def test_empty_seed(self):
        with pytest.raises(InvalidSeedError):
            derive_deterministic_meta_keys("")

    def test_non_text_seed(self):
        with pytest.raises(InvalidSeedError):
            derive_deterministic_meta_keys(12345)

    def test_unknown_chain(self):
        with pytest.raises(UnsupportedChainError, match="solana"):
            derive_deterministic_meta_keys("test-seed", "solana")


class TestChains:
    def test_registry(self):
        assert "aptos" in available_chains()
        assert "iota" in available_chains()
        assert get_chain("APTOS") is APTOS
        assert get_chain(IOTA) is IOTA

    def test_unsupported(self):
        with pytest.raises(UnsupportedChainError):
            get_chain("ethereum")

    def test_duplicate_registration(self):
        with pytest.raises(ChainAlreadyRegisteredError, match="already registered"):
            register_chain(APTOS)
        assert get_chain("aptos") is APTOS

    def test_register_custom(self):
        profile = ChainProfile(
            name="unit-test-chain",
            domain_salt=b"unit test salt",
            encoder=lambda p: "ut1" + p.to_bytes().hex(),
        )
        register_chain(profile, replace=True)
        assert get_chain("unit-test-chain") is profile

    def test_address_formats_differ(self):
        P = Scalar.random() * G
        a, b = aptos_address(P), iota_address(P)
        assert a.startswith("0x") and len(a) == 66
        assert b.startswith("0x") and len(b) == 66
        assert a != b


class TestStealthDerivation:
    @pytest.mark.parametrize("chain", ["aptos", "iota"])
    def test_payer_and_receiver_agree(self, chain):
        for _ in range(10):
            meta = generate_meta_keys()
            eph = generate_ephemeral_key()
            pub = derive_stealth_public(
                meta.spend.public_key, meta.view.public_key, eph.private_key, chain,
            )
            kp = derive_stealth_private(
                meta.spend.private_key, meta.view.private_key, eph.public_key, chain,
            )
            assert pub.address == kp.address
            assert pub.public_key == kp.public_key
            assert kp.private_key * G == pub.public_key

    def test_golden_stealth_vector(self):
        meta = derive_deterministic_meta_keys("test-seed", "aptos")
        pub = derive_stealth_public(
            meta.spend.public_key, meta.view.public_key, Hex(EPHEMERAL_PRIV),
        )
        assert pub.public_key.to_bytes().hex() == STEALTH_PUB
        assert pub.address == STEALTH_APTOS_ADDRESS

        kp = derive_stealth_private(
            meta.spend.private_key, meta.view.private_key, Hex(EPHEMERAL_PUB),
        )
        assert kp.private_bytes.hex() == STEALTH_PRIV
        assert kp.address == STEALTH_APTOS_ADDRESS

    def test_encoded_inputs(self):
        meta = generate_meta_keys()
        eph = generate_ephemeral_key()
        pub = derive_stealth_public(
            meta.spend_public_b58,
            Base58(meta.view_public_b58),
            eph.private_bytes,
        )
        kp = derive_stealth_private(
            Hex("0x" + meta.spend.private_bytes.hex()),
            meta.view.private_bytes,
            eph.public_b58,
        )
        assert pub.address == kp.address

    def test_fresh_ephemeral_gives_fresh_address(self):
        meta = generate_meta_keys()
        spend, view = meta.public_meta()
        a = derive_stealth_public(spend, view, generate_ephemeral_key().private_key)
        b = derive_stealth_public(spend, view, generate_ephemeral_key().private_key)
        assert a.address != b.address

    def test_chain_changes_address_not_key(self):
        meta = generate_meta_keys()
        eph = generate_ephemeral_key()
        a = derive_stealth_public(meta.spend.public_key, meta.view.public_key, eph.private_key, "aptos")
        b = derive_stealth_public(meta.spend.public_key, meta.view.public_key, eph.private_key, "iota")
        assert a.public_key == b.public_key
        assert a.address != b.address

    def test_is_own_address(self):
        meta = generate_meta_keys()
        other = generate_meta_keys()
        eph = generate_ephemeral_key()
        pub = derive_stealth_public(meta.spend.public_key, meta.view.public_key, eph.private_key)
        assert is_own_address(pub.address, meta.spend.private_key, meta.view.private_key, eph.public_key)
        assert is_own_address(pub.address.upper().replace("0X", "0x"), meta.spend.private_key,
                              meta.view.private_key, eph.public_key)
        assert not is_own_address(pub.address, other.spend.private_key, other.view.private_key,
                                  eph.public_key)

    def test_view_key_alone_is_not_spend_key(self):
        meta = generate_meta_keys()
        eph = generate_ephemeral_key()
        kp = derive_stealth_private(meta.spend.private_key, meta.view.private_key, eph.public_key)
        wrong = derive_stealth_private(meta.view.private_key, meta.view.private_key, eph.public_key)
        assert wrong.address != kp.address


class TestInvalidKeys:
    ZERO = b"\x00" * 32
    ORDER_BYTES = ORDER.to_bytes(32, "big")

    @pytest.mark.parametrize("bad", [ZERO, ORDER_BYTES, b"\xff" * 32])
    def test_payer_rejects_bad_ephemeral(self, bad):
        meta = generate_meta_keys()
        with pytest.raises(InvalidScalarError):
            derive_stealth_public(meta.spend.public_key, meta.view.public_key, bad)

    @pytest.mark.parametrize("bad", [ZERO, ORDER_BYTES])
    def test_receiver_rejects_bad_spend(self, bad):
        meta = generate_meta_keys()
        eph = generate_ephemeral_key()
        with pytest.raises(InvalidScalarError):
            derive_stealth_private(bad, meta.view.private_key, eph.public_key)

    @pytest.mark.parametrize("bad", [ZERO, ORDER_BYTES])
    def test_receiver_rejects_bad_view(self, bad):
        meta = generate_meta_keys()
        eph = generate_ephemeral_key()
        with pytest.raises(InvalidScalarError):
            derive_stealth_private(meta.spend.private_key, bad, eph.public_key)

    def test_zero_scalar_object_rejected(self):
        meta = generate_meta_keys()
        with pytest.raises(InvalidScalarError):
            derive_stealth_public(meta.spend.public_key, meta.view.public_key, Scalar(0))

    @pytest.mark.parametrize("bad", [0, ORDER, ORDER + 1])
    def test_int_keys_range_checked(self, bad):
        meta = generate_meta_keys()
        eph = generate_ephemeral_key()
        with pytest.raises(InvalidScalarError):
            derive_stealth_public(meta.spend.public_key, meta.view.public_key, bad)
        with pytest.raises(InvalidScalarError):
            derive_stealth_private(bad, meta.view.private_key, eph.public_key)
        with pytest.raises(InvalidScalarError):
            derive_stealth_private(meta.spend.private_key, bad, eph.public_key)
        with pytest.raises(InvalidScalarError):
            is_own_address("0x00", bad, meta.view.private_key, eph.public_key)

    def test_out_of_range_scalar_never_constructed(self):
        meta = generate_meta_keys()
        eph = generate_ephemeral_key()
        with pytest.raises(InvalidScalarError):
            derive_stealth_private(
                Scalar(meta.spend.private_key.value + ORDER),
                meta.view.private_key,
                eph.public_key,
            )

    def test_int_keys_accepted(self):
        meta = generate_meta_keys()
        eph = generate_ephemeral_key()
        by_int = derive_stealth_private(
            meta.spend.private_key.value, meta.view.private_key.value, eph.public_key,
        )
        assert by_int == derive_stealth_private(
            meta.spend.private_key, meta.view.private_key, eph.public_key,
        )
        assert derive_stealth_public(
            meta.spend.public_key, meta.view.public_key, eph.private_key.value,
        ).address == by_int.address

    def test_off_curve_public_key(self):
        meta = generate_meta_keys()
        eph = generate_ephemeral_key()
        with pytest.raises(InvalidPointError):
            derive_stealth_public(b"\x02" + b"\xff" * 32, meta.view.public_key, eph.private_key)
        with pytest.raises(InvalidPointError):
            derive_stealth_private(meta.spend.private_key, meta.view.private_key, b"\x03" * 10)
