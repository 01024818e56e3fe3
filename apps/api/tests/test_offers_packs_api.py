import json
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from models.generation_job import GenerationJob
from models.pack import Pack


def _offer_body(**overrides):
    body = {
        "project_id": "project-1",
        "name": "Sleep reset",
        "problem": "People wake up tired",
        "promise": "Wake up rested in 7 days",
        "proof": "2,000 coached clients",
        "pitch": "Join the free challenge",
        "brand_voice": "calm",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_offer_profile_crud(integration_client):
    client, _ = integration_client

    created = await client.post("/offers", json=_offer_body())
    assert created.status_code == 200
    profile = created.json()["profile"]
    assert profile["brand_voice"] == "calm"
    assert profile["constraints"] is None

    await client.post("/offers", json=_offer_body(project_id="project-2", name="Other"))

    listed = await client.get("/offers", params={"project_id": "project-1"})
    assert listed.status_code == 200
    assert [item["id"] for item in listed.json()["profiles"]] == [profile["id"]]

    updated = await client.put("/offers", json={"id": profile["id"], "pitch": "Book a call"})
    assert updated.status_code == 200
    assert updated.json()["profile"]["pitch"] == "Book a call"
    assert updated.json()["profile"]["promise"] == "Wake up rested in 7 days"

    deleted = await client.delete("/offers", params={"id": profile["id"]})
    assert deleted.status_code == 200
    assert deleted.json()["success"] is True

    listed = await client.get("/offers", params={"project_id": "project-1"})
    assert listed.json()["profiles"] == []


@pytest.mark.asyncio
async def test_offer_validation_errors(integration_client):
    client, _ = integration_client

    assert (await client.get("/offers")).status_code == 400
    assert (await client.post("/offers", json=_offer_body(pitch="  "))).status_code == 400
    assert (await client.put("/offers", json={"id": "missing", "name": "x"})).status_code == 404
    assert (await client.delete("/offers")).status_code == 400
    assert (await client.delete("/offers", params={"id": "missing"})).status_code == 404

    created = await client.post("/offers", json=_offer_body())
    blanked = await client.put("/offers", json={"id": created.json()["profile"]["id"], "problem": ""})
    assert blanked.status_code == 400


@pytest.mark.asyncio
async def test_pack_crud_and_duplicate(integration_client, sample_generation):
    client, _ = integration_client

    assert (await client.get("/packs")).status_code == 400
    assert (await client.post("/packs", json={"project_id": "p"})).status_code == 400

    created = await client.post(
        "/packs",
        json={"project_id": "p", "platform": "YouTube", "contents": sample_generation},
    )
    assert created.status_code == 200
    pack = created.json()["pack"]
    assert pack["platform"] == "youtube"

    fetched = await client.get(f"/packs/{pack['id']}")
    assert fetched.json()["pack"]["contents"]["script"] == sample_generation["script"]

    patched = await client.patch(
        f"/packs/{pack['id']}",
        json={"contents": {"script": "Edited"}, "project_id": "ignored"},
    )
    assert patched.status_code == 200
    assert patched.json()["pack"]["contents"] == {"script": "Edited"}
    assert patched.json()["pack"]["project_id"] == "p"

    assert (await client.patch(f"/packs/{pack['id']}", json={})).status_code == 400
    assert (await client.patch(f"/packs/{pack['id']}", json={"platform": "vine"})).status_code == 422

    duplicate = await client.post(f"/packs/{pack['id']}/duplicate")
    assert duplicate.status_code == 200
    copy = duplicate.json()["pack"]
    assert copy["id"] != pack["id"]
    assert copy["contents"] == {"script": "Edited"}

    listed = await client.get("/packs", params={"project_id": "p"})
    assert len(listed.json()["packs"]) == 2

    assert (await client.delete(f"/packs/{pack['id']}")).json() == {"success": True}
    assert (await client.get(f"/packs/{pack['id']}")).status_code == 404
    assert (await client.post("/packs/missing/duplicate")).status_code == 404


@pytest.mark.asyncio
async def test_deleting_offer_unlinks_packs(integration_client, sample_generation):
    client, session_maker = integration_client
    offer = await client.post("/offers", json=_offer_body())
    offer_id = offer.json()["profile"]["id"]
    pack = await client.post(
        "/packs",
        json={"project_id": "p", "platform": "tiktok", "offer_id": offer_id, "contents": sample_generation},
    )

    await client.delete("/offers", params={"id": offer_id})

    async with session_maker() as session:
        row = (await session.execute(select(Pack).where(Pack.id == pack.json()["pack"]["id"]))).scalar_one()
    assert row.offer_id is None
    assert row.contents["script"] == sample_generation["script"]


@pytest.mark.asyncio
async def test_regenerate_pack_overwrites_contents(
    integration_client, make_reference_payload, sample_generation
):
    client, session_maker = integration_client
    reference = await client.post("/references", json=make_reference_payload())
    reference_id = reference.json()["reference"]["id"]
    offer = await client.post("/offers", json=_offer_body())
    offer_id = offer.json()["profile"]["id"]
    pack = await client.post(
        "/packs",
        json={
            "project_id": "p",
            "reference_id": reference_id,
            "offer_id": offer_id,
            "platform": "instagram",
            "contents": {"script": "Old"},
        },
    )
    pack_id = pack.json()["pack"]["id"]
    chat = AsyncMock(return_value=json.dumps(sample_generation))

    with patch("services.llm_client.chat_json", new=chat):
        response = await client.post(f"/packs/{pack_id}/regenerate", json={"model": "deepseek/deepseek-chat"})

    assert response.status_code == 200
    assert response.json()["pack"]["contents"]["script"] == sample_generation["script"]
    assert chat.await_args.kwargs["model"] == "deepseek/deepseek-chat"
    prompt = chat.await_args.args[1]
    assert "Instagram Reels" in prompt
    assert "Wake up rested in 7 days" in prompt

    async with session_maker() as session:
        packs = (await session.execute(select(Pack))).scalars().all()
        job = (await session.execute(select(GenerationJob))).scalar_one()
    assert len(packs) == 1
    assert job.status == "completed"
    assert job.pack_id == pack_id


@pytest.mark.asyncio
async def test_regenerate_pack_without_offer_fails(integration_client, make_reference_payload, sample_generation):
    client, _ = integration_client
    reference = await client.post("/references", json=make_reference_payload())
    pack = await client.post(
        "/packs",
        json={
            "project_id": "p",
            "reference_id": reference.json()["reference"]["id"],
            "platform": "youtube",
            "contents": sample_generation,
        },
    )

    response = await client.post(f"/packs/{pack.json()['pack']['id']}/regenerate")
    assert response.status_code == 400
    assert (await client.post("/packs/missing/regenerate")).status_code == 404
