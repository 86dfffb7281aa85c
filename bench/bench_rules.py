import argparse
import statistics
import time

from authzrules import AccessRequest, Guard, ParentRequest, SecurityContext


def gen_rules(n: int) -> list:
    rules = []
    for i in range(n - 1):
        rules.append(
            {
                "id": f"grant_{i}",
                "pattern": f"managed/type{i}/*",
                "roles": "openidm-authorized",
                "methods": "read,query",
                "actions": "*",
            }
        )
    rules.append({"id": "admin", "pattern": "*", "roles": "openidm-admin", "methods": "*", "actions": "*"})
    return rules


def run(size: int, iters: int):
    guard = Guard(gen_rules(size))
    # worst case: only the last rule grants
    req = AccessRequest(
        id="managed/user/42",
        method="update",
        parent=ParentRequest(type="http", security=SecurityContext(roles=("openidm-admin",))),
    )
    lat = []
    for _ in range(iters):
        t0 = time.perf_counter()
        d = guard.authorize(req)
        lat.append((time.perf_counter() - t0) * 1000.0)
    return {
        "p50": statistics.median(lat),
        "avg": sum(lat) / len(lat),
        "p90": percentile(lat, 90),
        "allowed": d.allowed,
    }


def percentile(arr, p):
    arr2 = sorted(arr)
    k = int(round((p / 100.0) * (len(arr2) - 1)))
    return arr2[k]


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--sizes", type=int, nargs="+", default=[10, 50, 100, 500, 1000])
    ap.add_argument("--iters", type=int, default=200)
    args = ap.parse_args()
    print("size,avg_ms,p50_ms,p90_ms,allowed")
    for s in args.sizes:
        r = run(s, args.iters)
        print(f"{s},{r['avg']:.3f},{r['p50']:.3f},{r['p90']:.3f},{r['allowed']}")


if __name__ == "__main__":
    main()
