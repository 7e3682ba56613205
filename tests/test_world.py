"""
Tests for the host-owned world state.
"""
from goap_agent.beliefs import Belief, BeliefRegistry
from goap_agent.world import WorldState


class TestFlags:
    """Test boolean flags and flag beliefs."""

    def test_unknown_flag_is_false(self):
        assert WorldState().flag("Anything") is False

    def test_flag_belief_reads_world(self):
        world = WorldState()
        beliefs = BeliefRegistry()
        has_axe = world.flag_belief(beliefs, "HasAxe")

        assert not has_axe.evaluate()
        world.set_flag("HasAxe", True)
        assert has_axe.evaluate()

    def test_flag_belief_initial_value(self):
        world = WorldState()
        done = world.flag_belief(BeliefRegistry(), "Done", initial=True)

        assert done.evaluate()
        assert world.flags == {"Done": True}

    def test_flag_belief_keeps_existing_value(self):
        world = WorldState(flags={"Done": True})
        done = world.flag_belief(BeliefRegistry(), "Done")

        assert done.evaluate()

    def test_apply_effects_sets_known_flags(self):
        world = WorldState()
        beliefs = BeliefRegistry()
        has_wood = world.flag_belief(beliefs, "HasWood")
        nothing = beliefs.add_belief("Nothing", lambda: False)

        world.apply_effects([has_wood, nothing])

        assert has_wood.evaluate()
        assert "Nothing" not in world.flags

    def test_flags_returns_copy(self):
        world = WorldState(flags={"A": False})
        world.flags["A"] = True

        assert world.flag("A") is False


class TestResources:
    """Test resource accounting."""

    def test_request_decrements(self):
        world = WorldState(resources={"Wood": 2})

        assert world.request_resource("Wood")
        assert world.resource("Wood") == 1

    def test_depleted_resource(self):
        world = WorldState(resources={"Wood": 1})

        assert world.request_resource("Wood")
        assert not world.request_resource("Wood")
        assert world.resource("Wood") == 0

    def test_unknown_resource(self):
        world = WorldState()

        assert not world.request_resource("Gold")
        assert world.resource("Gold") == 0

    def test_add_resource(self):
        world = WorldState()

        assert world.add_resource("Food", 3) == 3
        assert world.add_resource("Food", 2) == 5
        assert world.resources == {"Food": 5}

    def test_is_resource_available(self):
        world = WorldState(resources={"Stone": 2})

        assert world.is_resource_available("Stone")
        assert world.is_resource_available("Stone", 2)
        assert not world.is_resource_available("Stone", 3)

    def test_resource_belief(self):
        world = WorldState(resources={"Food": 1})
        beliefs = BeliefRegistry()
        available = world.resource_belief(beliefs, "Food")

        assert available == Belief("FoodAvailable")
        assert "FoodAvailable" in beliefs
        assert available.evaluate()

        world.request_resource("Food")
        assert not available.evaluate()

    def test_resource_belief_registers_unknown_type(self):
        world = WorldState()
        available = world.resource_belief(BeliefRegistry(), "Ore")

        assert world.resources == {"Ore": 0}
        assert not available.evaluate()
