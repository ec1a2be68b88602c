import json
from pathlib import Path

import numpy as np

n_items = 40
rng = np.random.default_rng(7)

scores = np.sort(rng.uniform(0, 100, size=n_items))[::-1]
precision = rng.uniform(0.4, 1.0, size=n_items)
recall = rng.uniform(0.2, 0.95, size=n_items)
families = rng.choice(["cnn", "transformer", "tree"], size=n_items)
verified = rng.random(size=n_items) > 0.4

items = []
for i in range(n_items):
    item = {
        "id": f"run_{i:03d}",
        "rank": i + 1,
        "score": round(float(scores[i]), 3),
        "metrics": {
            "precision": round(float(precision[i]), 4),
            "recall": round(float(recall[i]), 4),
        },
        "categories": {"family": str(families[i])},
        "flags": {"verified": bool(verified[i])},
    }
    # leave some items without a preview image
    if i % 7 != 3:
        item["imageRef"] = f"run_{i:03d}/640/480"
    items.append(item)

Path("data").mkdir(exist_ok=True)
Path("data/demo_ranking.json").write_text(json.dumps({"items": items}, indent=2))
print("wrote data/demo_ranking.json", len(items))
