from collections import deque

import pytest

from conftest import EventLog
from control import Direction, ElevatorState, ElevatorStateError, FloorRangeError, FloorRequest


def put_in_motion(elevator, current, target, direction):
    elevator.state = ElevatorState.MOVING
    elevator.current_floor = current
    elevator.target_floor = target
    elevator.direction = direction


class TestPressFloorButton:
    def test_floor_ahead_extends_upward_leg(self, single_car):
        elevator = single_car.elevators[0]
        put_in_motion(elevator, 2, 5, Direction.UP)

        elevator.press_floor_button(7)
        assert elevator.target_floor == 7
        elevator.press_floor_button(7)
        assert elevator.target_floor == 7
        elevator.press_floor_button(4)
        assert elevator.target_floor == 7
        assert elevator.queued_target_floor is None

    def test_floor_behind_upward_car_is_queued_lowest_first(self, single_car):
        elevator = single_car.elevators[0]
        put_in_motion(elevator, 5, 8, Direction.UP)

        elevator.press_floor_button(3)
        assert elevator.queued_target_floor == 3
        elevator.press_floor_button(4)
        assert elevator.queued_target_floor == 3
        elevator.press_floor_button(1)
        assert elevator.queued_target_floor == 1
        assert elevator.target_floor == 8

    def test_downward_car_mirrors_the_policy(self, single_car):
        elevator = single_car.elevators[0]
        put_in_motion(elevator, 7, 3, Direction.DOWN)

        elevator.press_floor_button(1)
        assert elevator.target_floor == 1
        elevator.press_floor_button(5)
        assert elevator.target_floor == 1
        elevator.press_floor_button(8)
        elevator.press_floor_button(9)
        assert elevator.queued_target_floor == 9

    def test_out_of_range_press_changes_nothing(self, single_car):
        elevator = single_car.elevators[0]
        put_in_motion(elevator, 2, 5, Direction.UP)

        for floor in (-1, 10):
            with pytest.raises(FloorRangeError):
                elevator.press_floor_button(floor)
        assert elevator.target_floor == 5
        assert elevator.queued_target_floor is None

    def test_press_on_idle_car_starts_a_trip(self, single_car):
        elevator = single_car.elevators[0]

        elevator.press_floor_button(4)

        assert elevator.state is ElevatorState.IDLE
        assert elevator.current_floor == 4
        assert elevator.queued_target_floor is None
        assert elevator.doors.cycles == 1

    def test_press_on_out_of_service_car_is_ignored(self, single_car):
        elevator = single_car.elevators[0]
        single_car.take_out_of_service(0)

        elevator.press_floor_button(6)

        assert elevator.state is ElevatorState.OUT_OF_SERVICE
        assert elevator.current_floor == 0
        assert elevator.target_floor == 0

    def test_press_routed_through_controller(self, single_car):
        elevator = single_car.elevators[0]
        put_in_motion(elevator, 2, 5, Direction.UP)

        single_car.press_floor_button(0, 9)

        assert elevator.target_floor == 9


class TestGoToFloor:
    def test_refuses_a_moving_car(self, single_car):
        elevator = single_car.elevators[0]
        put_in_motion(elevator, 2, 5, Direction.UP)

        with pytest.raises(ElevatorStateError):
            elevator.go_to_floor(7)

    def test_refuses_an_out_of_service_car(self, single_car):
        single_car.take_out_of_service(0)

        with pytest.raises(ElevatorStateError):
            single_car.elevators[0].go_to_floor(3)

    def test_range_is_checked_before_state(self, single_car):
        elevator = single_car.elevators[0]
        put_in_motion(elevator, 2, 5, Direction.UP)

        with pytest.raises(FloorRangeError):
            elevator.go_to_floor(10)

    def test_detached_car_cannot_move(self):
        from control import Elevator

        with pytest.raises(ElevatorStateError):
            Elevator(7).go_to_floor(1)


class TestTraversal:
    def test_summoned_car_travels_picks_up_and_idles(self, single_car):
        events = EventLog(single_car, "floor", "pickup", "arrival", "idle")
        elevator = single_car.elevators[0]

        assert single_car.summon(5, Direction.UP) is elevator

        assert elevator.state is ElevatorState.IDLE
        assert elevator.current_floor == 5
        assert events.floors() == [0, 1, 2, 3, 4, 5]
        assert [payload["floor"] for payload in events.payloads("pickup")] == [5]
        assert events.payloads("arrival") == []
        assert not any(single_car.up_summons)

    def test_floor_pressed_behind_car_becomes_next_leg(self, single_car):
        events = EventLog(single_car, "floor", "leg")
        elevator = single_car.elevators[0]

        def board(payload):
            if payload["floor"] == 2:
                elevator.press_floor_button(8)

        def press_behind(payload):
            if payload["floor"] == 5 and payload["direction"] == "up":
                elevator.press_floor_button(3)
                assert elevator.queued_target_floor == 3
                assert elevator.target_floor == 8

        single_car.on_event("pickup", board)
        single_car.on_event("floor", press_behind)
        single_car.summon(2, Direction.UP)

        legs = events.payloads("leg")
        assert legs[0]["floor"] == 8
        assert legs[0]["target_floor"] == 3
        assert legs[0]["direction"] == "down"
        assert events.floors() == [0, 1, 2, 3, 4, 5, 6, 7, 8, 8, 7, 6, 5, 4, 3]
        assert elevator.current_floor == 3
        assert elevator.state is ElevatorState.IDLE
        assert elevator.queued_target_floor is None

    def test_oldest_pending_call_is_served_first(self, single_car):
        events = EventLog(single_car, "leg")
        elevator = single_car.elevators[0]
        single_car.set_max_distance_threshold(0)
        for floor in (8, 1):
            single_car.down_summons[floor] = True
            single_car.pending_requests.append(FloorRequest(floor, Direction.DOWN))

        elevator.go_to_floor(2)

        legs = events.payloads("leg")
        assert legs[0]["target_floor"] == 8
        assert [leg["target_floor"] for leg in legs] == [8, 8, 1]
        assert elevator.current_floor == 1
        assert elevator.state is ElevatorState.IDLE
        assert not single_car.pending_requests
        assert not any(single_car.down_summons)

    def test_starting_a_trip_claims_pending_calls_within_reach(self, single_car):
        events = EventLog(single_car, "departure", "pickup")
        elevator = single_car.elevators[0]
        single_car.set_max_distance_threshold(3)
        pending_at_departure = []
        single_car.on_event("departure", lambda payload: pending_at_departure.append(list(single_car.pending_requests)))
        for floor in (2, 4, 9):
            single_car.up_summons[floor] = True
            single_car.pending_requests.append(FloorRequest(floor, Direction.UP))

        elevator.press_floor_button(1)

        assert events.payloads("departure")[0]["target_floor"] == 2
        assert pending_at_departure[0] == [FloorRequest(4, Direction.UP), FloorRequest(9, Direction.UP)]
        assert [payload["floor"] for payload in events.payloads("pickup")] == [2, 4, 9]
        assert elevator.current_floor == 9
        assert elevator.state is ElevatorState.IDLE

    def test_claim_keeps_unclaimed_calls_in_order(self, single_car):
        elevator = single_car.elevators[0]
        single_car.set_max_distance_threshold(4)
        put_in_motion(elevator, 8, 5, Direction.DOWN)
        single_car.pending_requests.extend(
            [
                FloorRequest(4, Direction.DOWN),
                FloorRequest(2, Direction.DOWN),
                FloorRequest(6, Direction.UP),
                FloorRequest(9, Direction.DOWN),
            ]
        )

        elevator._claim_pending_requests()

        assert elevator.target_floor == 4
        assert single_car.pending_requests == deque(
            [FloorRequest(2, Direction.DOWN), FloorRequest(6, Direction.UP), FloorRequest(9, Direction.DOWN)]
        )

    def test_idle_car_ignores_its_stale_target(self, single_car):
        elevator = single_car.elevators[0]
        elevator.current_floor = elevator.target_floor = 5

        single_car.summon(2, Direction.UP)

        assert elevator.current_floor == 2
        assert elevator.direction is Direction.UP
        assert elevator.state is ElevatorState.IDLE
        assert not single_car.up_summons[2]
        assert elevator.doors.cycles == 1

    def test_caller_going_the_other_way_is_served_on_turnaround(self, single_car):
        events = EventLog(single_car, "pickup", "arrival")
        elevator = single_car.elevators[0]

        single_car.summon(6, Direction.DOWN)

        assert elevator.current_floor == 6
        assert elevator.direction is Direction.DOWN
        assert [payload["direction"] for payload in events.payloads("pickup")] == ["down"]
        assert events.payloads("arrival") == []
        assert not single_car.down_summons[6]

    def test_passing_car_drops_stale_pending_copy(self, single_car):
        elevator = single_car.elevators[0]
        single_car.down_summons[7] = True
        single_car.pending_requests.append(FloorRequest(7, Direction.DOWN))

        def late_call(payload):
            single_car.up_summons[3] = True
            single_car.pending_requests.append(FloorRequest(3, Direction.UP))

        single_car.on_event("departure", late_call)
        elevator.go_to_floor(5)

        assert not single_car.pending_requests
        assert not single_car.up_summons[3]
        assert not single_car.down_summons[7]
        assert elevator.current_floor == 7
        assert elevator.state is ElevatorState.IDLE

    def test_door_cycle_sequence(self, recorded_car, recorder):
        recorded_car.on_event("pickup", lambda payload: recorder.calls.append("pickup"))

        recorded_car.summon(3, Direction.UP)

        assert recorder.calls == ["wait 2.0", "open", "pickup", "wait 7.0", "close", "wait 2.0"]

    def test_taken_out_of_service_mid_trip_stops_in_place(self, single_car):
        events = EventLog(single_car, "pending", "pickup")
        elevator = single_car.elevators[0]
        broken = []

        def breakdown(payload):
            if payload["floor"] == 3 and not broken:
                broken.append(payload)
                single_car.take_out_of_service(0)

        single_car.on_event("floor", breakdown)
        single_car.summon(7, Direction.UP)

        assert elevator.state is ElevatorState.OUT_OF_SERVICE
        assert elevator.current_floor == 3
        assert single_car.up_summons[7]
        assert list(single_car.pending_requests) == [FloorRequest(7, Direction.UP)]
        assert [payload["floor"] for payload in events.payloads("pending")] == [7]

        single_car.restore_elevator(0)

        assert elevator.state is ElevatorState.IDLE
        assert elevator.current_floor == 7
        assert [payload["floor"] for payload in events.payloads("pickup")] == [7]
        assert not single_car.up_summons[7]
        assert not single_car.pending_requests

    def test_call_made_during_arrival_at_that_floor_is_served(self, single_car):
        events = EventLog(single_car, "pickup", "arrival")
        elevator = single_car.elevators[0]
        called = []

        def late_call(payload):
            if not called:
                called.append(payload)
                assert single_car.summon(5, Direction.UP) is elevator

        single_car.on_event("arrival", late_call)
        elevator.press_floor_button(5)

        assert elevator.state is ElevatorState.IDLE
        assert elevator.current_floor == 5
        assert len(events.payloads("arrival")) == 1
        assert [payload["floor"] for payload in events.payloads("pickup")] == [5]
        assert not single_car.up_summons[5]
        assert not single_car.pending_requests
