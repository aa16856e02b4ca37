#!/usr/bin/env python3
import sys
import csv
import json
import numpy as np
import matplotlib.pyplot as plt

# ------------------------------------------
# Arguments
# ------------------------------------------
if len(sys.argv) < 2:
    print("Usage: plot_track.py <track.csv> [route.json]")
    sys.exit(1)

csvfile = sys.argv[1]
routefile = sys.argv[2] if len(sys.argv) > 2 else None

# Mean Earth radius, same as the fusion core
R = 6371000.0


def to_local(lat, lon, ref_lat, ref_lon):
    """Equirectangular projection to meters east/north of the reference."""
    lat = np.radians(lat)
    lon = np.radians(lon)
    ref_lat = np.radians(ref_lat)
    ref_lon = np.radians(ref_lon)
    x = (lon - ref_lon) * np.cos((lat + ref_lat) / 2) * R
    y = (lat - ref_lat) * R
    return x, y


# ------------------------------------------
# Read recorder CSV
# ------------------------------------------
raw_lat, raw_lon = [], []
sm_lat, sm_lon = [], []

with open(csvfile, "r") as f:
    reader = csv.DictReader(f)
    for row in reader:
        if row["event"] != "fix":
            continue
        try:
            raw_lat.append(float(row["raw_lat"]))
            raw_lon.append(float(row["raw_lon"]))
            sm_lat.append(float(row["smoothed_lat"]))
            sm_lon.append(float(row["smoothed_lon"]))
        except ValueError:
            continue

if not raw_lat:
    print("No fixes found in track log!")
    sys.exit(1)

ref_lat, ref_lon = raw_lat[0], raw_lon[0]
raw_x, raw_y = to_local(np.array(raw_lat), np.array(raw_lon), ref_lat, ref_lon)
sm_x, sm_y = to_local(np.array(sm_lat), np.array(sm_lon), ref_lat, ref_lon)

# ------------------------------------------
# Plot
# ------------------------------------------
plt.figure(figsize=(8, 8))

if routefile:
    with open(routefile) as f:
        routes = json.load(f)
    for name, style in (("outbound", "g--"), ("inbound", "m--")):
        wps = routes.get(name, [])
        if not wps:
            continue
        wx, wy = to_local(np.array([w["lat"] for w in wps]),
                          np.array([w["lon"] for w in wps]), ref_lat, ref_lon)
        plt.plot(wx, wy, style, label=f"Route ({name})", linewidth=1)
        plt.scatter(wx, wy, s=20, c=style[0])

plt.scatter(raw_x, raw_y, s=12, c='red', label="GPS fix", alpha=0.7)
plt.plot(sm_x, sm_y, 'b-', label="Smoothed", linewidth=2)

plt.xlabel("East (m)")
plt.ylabel("North (m)")
plt.title("Walking Track (GPS vs smoothed)")
plt.grid(True)
plt.axis('equal')
plt.legend()
plt.tight_layout()
plt.show()


#Sample run command: python3 plot_track.py track.csv ../examples/route.json
