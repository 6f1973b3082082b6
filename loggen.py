import argparse
import datetime
import random
from typing import Optional


DEVICES = ["sensor-01", "sensor-02", "sensor-03", "gateway-01", "tracker-07"]
MOTION_STATES = ["none", "detected", "idle"]
ERROR_CODES = ["E100", "E201", "E404", "E503"]


def generate_telemetry_logs(filename="telemetry.log", target_lines=1000, seed: Optional[int] = None):
    rng = random.Random(seed)

    current_time = datetime.datetime(2024, 1, 1, 10, 0, 0)
    temperatures = {d: rng.uniform(18, 26) for d in DEVICES}
    batteries = {d: rng.randint(60, 100) for d in DEVICES}

    with open(filename, "w", encoding="utf-8") as f:
        for _ in range(target_lines):
            device = rng.choice(DEVICES)
            event = rng.choices(
                ["temperature", "battery", "motion", "error"],
                weights=[5, 3, 2, 1],
            )[0]

            current_time += datetime.timedelta(seconds=rng.randint(1, 30))
            ts = current_time.strftime("%Y-%m-%d %H:%M:%S")

            if event == "temperature":
                # mostly drift, sometimes a jump big enough to be flagged
                step = rng.uniform(-8, 8) if rng.random() < 0.1 else rng.uniform(-1.5, 1.5)
                temperatures[device] += step
                value = f"{temperatures[device]:.1f}"
            elif event == "battery":
                drop = rng.randint(21, 40) if rng.random() < 0.05 else rng.randint(0, 3)
                batteries[device] = max(0, batteries[device] - drop)
                value = str(batteries[device])
            elif event == "motion":
                value = rng.choice(MOTION_STATES)
            else:
                value = rng.choice(ERROR_CODES)

            f.write(f"{ts} device {device} event {event} value {value}\n")

    return filename


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate a synthetic telemetry log")
    parser.add_argument("--output", default="telemetry.log")
    parser.add_argument("--lines", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    generate_telemetry_logs(args.output, args.lines, args.seed)
    print(f"Generated {args.lines} lines in {args.output}")


if __name__ == "__main__":
    main()
