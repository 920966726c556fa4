import base64

import pytest

from jumpstudy.services.avatar import AVATAR_STYLES, UnknownStyleError, generate_avatar


class TestGenerateAvatar:
    def test_deterministic(self):
        assert generate_avatar("identicon", "mya") == generate_avatar("identicon", "mya")
        assert generate_avatar("identicon", "mya")["svg"] != generate_avatar("identicon", "zaw")["svg"]

    def test_all_styles_render(self):
        for style in AVATAR_STYLES:
            result = generate_avatar(style, "seed", 64)
            assert result["svg"].startswith("<svg")
            assert 'width="64"' in result["svg"]
            decoded = base64.b64decode(result["dataUri"].split(",", 1)[1]).decode()
            assert decoded == result["svg"]

    def test_initials(self):
        assert ">MT</text>" in generate_avatar("initials", "mya thu")["svg"]

    def test_unknown_style(self):
        with pytest.raises(UnknownStyleError):
            generate_avatar("cartoon", "x")


@pytest.mark.asyncio
async def test_avatar_endpoint(client):
    r = await client.post("/api/avatar/generate", json={"style": "rings", "seed": "abc"})
    assert r.status_code == 200
    assert r.json()["style"] == "rings"

    r = await client.post("/api/avatar/generate", json={"style": "rings"})
    assert r.status_code == 400
    r = await client.post("/api/avatar/generate", json={"style": "cartoon", "seed": "abc"})
    assert r.status_code == 400
    r = await client.post("/api/avatar/generate", json={"style": "rings", "seed": "a", "size": 5})
    assert r.status_code == 400
