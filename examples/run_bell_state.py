"""Example: step through a Bell pair and measure one half."""

from tiny_qstep import CircuitSession, show_measurement, show_state, show_timeline

print("=" * 50)
print("tiny-qstep: Bell State Example")
print("=" * 50)

session = CircuitSession(2)
session.add_gate("H", [0], 0).add_gate("CNOT", [0, 1], 1)

print("\nTimeline:")
print(show_timeline(session.timeline))

for _ in range(session.num_steps):
    print(f"\nStep {session.current_step}:")
    print(show_state(session.current_entry.state))
    session.step_forward()

result = session.measure([0])
print()
print(show_measurement(result))
print("\nCollapsed state:")
print(show_state(session.current_entry.state))
print("\nExpected: measuring q0 fixes q1 to the same value (entangled!)")
