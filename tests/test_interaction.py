"""
Tests for protocols/interaction.py
"""

import numpy as np
import pytest

from social_swarm.core.agent import Personality, SocialAgent
from social_swarm.core.history import Valence
from social_swarm.protocols.interaction import (
    BASE_MESSAGES,
    InteractionEngine,
    compose_message,
    footprints_overlap,
    message_pool,
    pair_key,
)

ROSTER = ("A", "B")


def make_agent(name, personality=None, position=(0.0, 0.0)):
    return SocialAgent.spawn(
        name, ROSTER, personality or Personality(), np.array(position), np.zeros(2)
    )


class TestMessagePool:
    """Tests for personality-dependent message pools."""

    def test_base_pools(self):
        plain = make_agent("A")
        for valence in Valence:
            assert message_pool(plain, valence) == BASE_MESSAGES[valence]

    def test_aggressive_speaker_adds_negative_line(self):
        agent = make_agent("A", Personality(aggression=71))
        pool = message_pool(agent, Valence.NEGATIVE)
        assert len(pool) == len(BASE_MESSAGES[Valence.NEGATIVE]) + 1
        assert "Don't mess with me!" in pool
        assert message_pool(agent, Valence.POSITIVE) == BASE_MESSAGES[Valence.POSITIVE]

    def test_friendly_speaker_adds_positive_line(self):
        agent = make_agent("A", Personality(friendliness=90))
        assert "You're my favorite person here!" in message_pool(agent, Valence.POSITIVE)

    def test_intelligent_speaker_adds_neutral_line(self):
        agent = make_agent("A", Personality(intelligence=99))
        pool = message_pool(agent, Valence.NEUTRAL)
        assert pool[-1] == "Have you considered the implications of our situation?"

    def test_threshold_is_strict(self):
        agent = make_agent("A", Personality(aggression=70))
        assert message_pool(agent, Valence.NEGATIVE) == BASE_MESSAGES[Valence.NEGATIVE]

    def test_pools_do_not_grow_between_calls(self):
        agent = make_agent("A", Personality(aggression=95, friendliness=95, intelligence=95))
        sizes = {len(message_pool(agent, Valence.NEGATIVE)) for _ in range(20)}
        assert sizes == {4}
        assert len(BASE_MESSAGES[Valence.NEGATIVE]) == 3


class TestComposeMessage:
    """Tests for compose_message."""

    def test_prefixed_with_speaker(self):
        agent = make_agent("A")
        rng = np.random.default_rng(0)
        message = compose_message(agent, Valence.NEUTRAL, rng)
        assert message in [f'A: "{line}"' for line in BASE_MESSAGES[Valence.NEUTRAL]]

    def test_selection_covers_extras(self):
        agent = make_agent("A", Personality(friendliness=80))
        rng = np.random.default_rng(1)
        seen = {compose_message(agent, Valence.POSITIVE, rng) for _ in range(300)}
        assert 'A: "You\'re my favorite person here!"' in seen
        assert len(seen) == 4


class TestGeometry:
    """Tests for pair keys and footprint overlap."""

    def test_pair_key_is_order_free(self):
        assert pair_key("Kaya", "Geeny") == "Geeny-Kaya"
        assert pair_key("Geeny", "Kaya") == "Geeny-Kaya"

    def test_footprints_overlap(self):
        a = make_agent("A", position=(0.0, 0.0))
        near = make_agent("B", position=(60.0, 79.0))
        far = make_agent("B", position=(60.0, 80.0))
        assert footprints_overlap(a, near, 100.0)
        assert not footprints_overlap(a, far, 100.0)

    def test_colocated_agents_overlap(self):
        a = make_agent("A", position=(10.0, 10.0))
        b = make_agent("B", position=(10.0, 10.0))
        assert footprints_overlap(a, b, 100.0)


class TestInteractionEngine:
    """Tests for InteractionEngine cooldowns and utterances."""

    def test_first_meeting_is_accepted(self):
        engine = InteractionEngine(cooldown_ms=3000)
        encounter = engine.try_encounter(make_agent("A"), make_agent("B"), now=16.0)
        assert encounter is not None
        assert encounter.speaker == "A"
        assert encounter.listener == "B"
        assert encounter.speaker_valence is Valence.NEUTRAL
        assert engine.last_interaction == {"A-B": 16.0}

    def test_cooldown_blocks_either_direction(self):
        engine = InteractionEngine(cooldown_ms=3000)
        a, b = make_agent("A"), make_agent("B")
        engine.try_encounter(a, b, now=0.0)
        assert engine.try_encounter(a, b, now=1000.0) is None
        assert engine.try_encounter(b, a, now=2999.0) is None
        assert engine.last_interaction["A-B"] == 0.0

    def test_cooldown_expires(self):
        engine = InteractionEngine(cooldown_ms=3000)
        a, b = make_agent("A"), make_agent("B")
        engine.try_encounter(a, b, now=0.0)
        assert engine.try_encounter(b, a, now=3000.0) is not None
        assert engine.last_interaction["A-B"] == 3000.0

    def test_dead_agents_do_not_talk(self):
        engine = InteractionEngine()
        assert engine.try_encounter(make_agent("A").eliminated(), make_agent("B"), 0.0) is None
        assert engine.last_interaction == {}

    def test_valences_follow_each_side(self):
        engine = InteractionEngine()
        a = make_agent("A").with_relationship("B", 60)
        b = make_agent("B").with_relationship("A", -70)
        encounter = engine.try_encounter(a, b, now=0.0)
        assert encounter.speaker_valence is Valence.POSITIVE
        assert encounter.listener_valence is Valence.NEGATIVE

    def test_utterance(self):
        engine = InteractionEngine()
        speaker = make_agent("A", position=(12.5, 40.0))
        interaction = engine.utterance(
            speaker, "B", Valence.NEGATIVE, now=250.0, rng=np.random.default_rng(2)
        )
        assert interaction.speaker == "A"
        assert interaction.valence is Valence.NEGATIVE
        assert interaction.effect.target == "B"
        assert interaction.effect.relationship_change == -10
        assert interaction.timestamp == 250.0
        assert interaction.position == (12.5, 40.0)
        assert interaction.message.startswith('A: "')

    def test_reset(self):
        engine = InteractionEngine()
        engine.try_encounter(make_agent("A"), make_agent("B"), now=0.0)
        engine.reset()
        assert engine.is_eligible("A", "B", now=1.0)
