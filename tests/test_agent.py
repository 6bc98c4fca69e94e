"""
Tests for the Personality and SocialAgent records.
"""

import numpy as np
import pytest

from social_swarm.core.agent import Personality, SocialAgent


def make_agent(name="Geeny", roster=("Geeny", "Kaya", "Cinax"), **kwargs):
    return SocialAgent.spawn(
        name,
        roster,
        personality=kwargs.get("personality", Personality()),
        position=kwargs.get("position", np.array([10.0, 20.0])),
        velocity=kwargs.get("velocity", np.array([1.0, -1.0])),
    )


class TestPersonality:
    """Tests for Personality."""

    def test_default_traits(self):
        p = Personality()
        assert p.friendliness == 50
        assert p.aggression == 50
        assert p.trustworthiness == 50
        assert p.intelligence == 50

    def test_rejects_out_of_range_trait(self):
        with pytest.raises(ValueError):
            Personality(aggression=101)
        with pytest.raises(ValueError):
            Personality(friendliness=-1)

    def test_random_traits_in_range(self):
        rng = np.random.default_rng(3)
        for _ in range(50):
            p = Personality.random(rng)
            for trait in (p.friendliness, p.aggression, p.trustworthiness, p.intelligence):
                assert 0 <= trait < 100
                assert isinstance(trait, int)

    def test_immutable(self):
        p = Personality()
        with pytest.raises(AttributeError):
            p.aggression = 10


class TestSocialAgent:
    """Tests for SocialAgent."""

    def test_spawn_neutral_toward_everyone_else(self):
        agent = make_agent()
        assert dict(agent.relationships) == {"Kaya": 0, "Cinax": 0}
        assert agent.alive is True

    def test_arrays_are_float_and_read_only(self):
        agent = make_agent(position=[1, 2], velocity=[0, 0])
        assert agent.position.dtype == np.float64
        with pytest.raises(ValueError):
            agent.position[0] = 5.0

    def test_relationship_to_unknown_is_neutral(self):
        agent = make_agent()
        assert agent.relationship_to("Nobody") == 0

    def test_with_relationship_returns_new_record(self):
        agent = make_agent()
        updated = agent.with_relationship("Kaya", 25)
        assert updated.relationship_to("Kaya") == 25
        assert agent.relationship_to("Kaya") == 0
        assert updated is not agent

    def test_relationships_cannot_be_patched(self):
        agent = make_agent()
        with pytest.raises(TypeError):
            agent.relationships["Kaya"] = 99

    def test_moved_keeps_identity_fields(self):
        agent = make_agent()
        moved = agent.moved(np.array([5.0, 5.0]), np.array([0.5, 0.5]))
        np.testing.assert_array_equal(moved.position, [5.0, 5.0])
        np.testing.assert_array_equal(moved.velocity, [0.5, 0.5])
        assert moved.personality is agent.personality
        np.testing.assert_array_equal(agent.position, [10.0, 20.0])

    def test_moved_without_velocity_keeps_velocity(self):
        agent = make_agent()
        moved = agent.moved(np.array([0.0, 0.0]))
        np.testing.assert_array_equal(moved.velocity, agent.velocity)

    def test_eliminated(self):
        agent = make_agent()
        dead = agent.eliminated()
        assert dead.alive is False
        assert agent.alive is True
        assert dead.name == agent.name

    def test_distance_to(self):
        a = make_agent(position=np.array([0.0, 0.0]))
        b = make_agent("Kaya", position=np.array([3.0, 4.0]))
        assert a.distance_to(b) == pytest.approx(5.0)

    def test_speed(self):
        agent = make_agent(velocity=np.array([3.0, 4.0]))
        assert agent.speed == pytest.approx(5.0)
