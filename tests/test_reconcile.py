"""Tests for EntityReconciler (heroes, items, abilities, leagues).

Each test follows the pattern:
- Given: stored rows and a fetch function returning (records, status)
- When: reconcile() runs
- Then: the table matches upstream with no duplicates and no needless writes
"""
from unittest.mock import Mock

import pytest
from sqlalchemy import select

from dota_sync.models import Hero, Item, League
from dota_sync.reconcile import ENTITY_KINDS, EntityReconciler

HEROES = ENTITY_KINDS["heroes"]
LEAGUES = ENTITY_KINDS["leagues"]

ANTIMAGE = {"id": 1, "name": "npc_dota_hero_antimage", "localized_name": "Anti-Mage"}
AXE = {"id": 2, "name": "npc_dota_hero_axe", "localized_name": "Axe"}


def fetch(records, status=200):
    return Mock(return_value=(records, status))


def heroes_by_steam_id(db_session):
    return {h.steam_id: h for h in db_session.scalars(select(Hero))}


class TestEntityReconciler:

    def test_new_records_are_inserted_with_natural_key(self, store, db_session):
        result = EntityReconciler(store).reconcile(HEROES, fetch([ANTIMAGE, AXE]))

        heroes = heroes_by_steam_id(db_session)
        assert set(heroes) == {1, 2}
        assert heroes[1].name == "npc_dota_hero_antimage"
        assert heroes[2].localized_name == "Axe"
        # storage assigns its own primary key
        assert all(h.id is not None for h in heroes.values())
        assert (result.created, result.updated, result.unchanged) == (2, 0, 0)

    def test_changed_fields_are_updated_in_place(self, store, db_session):
        db_session.add(Hero(steam_id=1, name="npc_dota_hero_antimage", localized_name="Anti Mage"))
        db_session.commit()
        original_id = db_session.scalar(select(Hero.id))

        result = EntityReconciler(store).reconcile(HEROES, fetch([ANTIMAGE]))

        heroes = db_session.scalars(select(Hero)).all()
        assert len(heroes) == 1
        assert heroes[0].id == original_id
        assert heroes[0].localized_name == "Anti-Mage"
        assert (result.created, result.updated) == (0, 1)

    def test_unchanged_rows_are_not_written(self, store, db_session):
        db_session.add(Hero(steam_id=1, name="npc_dota_hero_antimage", localized_name="Anti-Mage"))
        db_session.commit()
        store.update = Mock(wraps=store.update)

        result = EntityReconciler(store).reconcile(HEROES, fetch([ANTIMAGE, AXE]))

        store.update.assert_not_called()
        assert (result.created, result.updated, result.unchanged) == (1, 0, 1)

    def test_second_run_with_same_data_changes_nothing(self, store, db_session):
        reconciler = EntityReconciler(store)
        reconciler.reconcile(HEROES, fetch([ANTIMAGE, AXE]))
        store.update = Mock(wraps=store.update)
        store.bulk_insert = Mock(wraps=store.bulk_insert)

        result = reconciler.reconcile(HEROES, fetch([ANTIMAGE, AXE]))

        store.update.assert_not_called()
        store.bulk_insert.assert_called_once_with(Hero, [])
        assert len(heroes_by_steam_id(db_session)) == 2
        assert (result.created, result.updated, result.unchanged) == (0, 0, 2)

    def test_new_rows_go_in_one_bulk_insert(self, store):
        store.bulk_insert = Mock(wraps=store.bulk_insert)

        EntityReconciler(store).reconcile(HEROES, fetch([ANTIMAGE, AXE]))

        store.bulk_insert.assert_called_once()
        model, rows = store.bulk_insert.call_args.args
        assert model is Hero
        assert sorted(r["steam_id"] for r in rows) == [1, 2]
        assert all("id" not in r for r in rows)

    @pytest.mark.parametrize("status", [500, 403, 0])
    def test_non_success_status_writes_nothing(self, store, db_session, status):
        db_session.add(Hero(steam_id=1, name="npc_dota_hero_antimage", localized_name="old"))
        db_session.commit()

        result = EntityReconciler(store).reconcile(HEROES, fetch([ANTIMAGE, AXE], status))

        assert result.skipped is True
        heroes = heroes_by_steam_id(db_session)
        assert set(heroes) == {1}
        assert heroes[1].localized_name == "old"

    def test_unknown_upstream_fields_are_ignored(self, store, db_session):
        record = {**AXE, "roles": ["Initiator"], "img": "axe.png"}

        EntityReconciler(store).reconcile(HEROES, fetch([record]))

        assert heroes_by_steam_id(db_session)[2].name == "npc_dota_hero_axe"

    def test_record_without_natural_key_raises(self, store, db_session):
        with pytest.raises(KeyError):
            EntityReconciler(store).reconcile(HEROES, fetch([{"name": "npc_dota_hero_nobody"}]))
        assert heroes_by_steam_id(db_session) == {}

    def test_leagues_match_on_leagueid(self, store, db_session):
        db_session.add(League(leagueid=1212, name="Dota 2 Asia Championships", description="old"))
        db_session.commit()
        upstream = [
            {"leagueid": 1212, "name": "Dota 2 Asia Championships",
             "description": "DAC 2015", "tournament_url": "http://dac.example", "itemdef": 10581},
            {"leagueid": 2339, "name": "The International 2015",
             "description": "TI5", "tournament_url": "http://ti.example", "itemdef": 15000},
        ]

        result = EntityReconciler(store).reconcile(LEAGUES, fetch(upstream))

        leagues = {lg.leagueid: lg for lg in db_session.scalars(select(League))}
        assert set(leagues) == {1212, 2339}
        assert leagues[1212].description == "DAC 2015"
        assert leagues[2339].itemdef == 15000
        assert (result.created, result.updated) == (1, 1)

    def test_refresh_fetches_through_client_method(self, store, db_session, client):
        client.get_items.return_value = (
            [{"id": 1, "name": "item_blink", "cost": 2250, "secret_shop": 0,
              "side_shop": 1, "recipe": 0, "localized_name": "Blink Dagger"}],
            200,
        )

        EntityReconciler(store).refresh("items", client)

        client.get_items.assert_called_once_with()
        item = db_session.scalar(select(Item))
        assert (item.steam_id, item.cost, item.side_shop) == (1, 2250, 1)

    def test_refresh_all_covers_every_kind(self, store, client):
        for kind in ENTITY_KINDS.values():
            getattr(client, kind.fetch).return_value = ([], 200)

        results = EntityReconciler(store).refresh_all(client)

        assert list(results) == ["heroes", "items", "abilities", "leagues"]
        for kind in ENTITY_KINDS.values():
            getattr(client, kind.fetch).assert_called_once()
