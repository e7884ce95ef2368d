from chat_app.core.password_hash import PasswordHash


def make_hasher() -> PasswordHash:
    return PasswordHash(n=2 ** 10)


async def test_hash_and_compare():
    hasher = make_hasher()
    hashed = await hasher.hash("secret123")

    assert hashed.startswith("scrypt$")
    assert "secret123" not in hashed
    assert await hasher.compare("secret123", hashed)
    assert not await hasher.compare("secret124", hashed)


async def test_hashes_are_salted():
    hasher = make_hasher()

    assert await hasher.hash("secret123") != await hasher.hash("secret123")


async def test_cost_parameters_travel_with_hash():
    hashed = await PasswordHash(n=2 ** 11).hash("secret123")

    assert await make_hasher().compare("secret123", hashed)


async def test_malformed_hash_never_matches():
    hasher = make_hasher()

    assert not await hasher.compare("secret123", "")
    assert not await hasher.compare("secret123", "bcrypt$whatever")
    assert not await hasher.compare("secret123", "scrypt$x$8$1$AAAA$AAAA")
