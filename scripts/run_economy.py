"""
Run Economy Script.

Usage:
    python scripts/run_economy.py
    python scripts/run_economy.py economy=village experiment.num_rounds=500
"""

import json
import logging
import os

import hydra
from omegaconf import DictConfig

from simmarket.economy import Economy


@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    # Configure logging
    log_level = getattr(logging, cfg.experiment.log_level.upper())

    # Force root logger
    logging.getLogger().setLevel(log_level)

    # Force package loggers
    logging.getLogger("simmarket").setLevel(log_level)
    logging.getLogger("traders").setLevel(log_level)

    # Add handler if none exists (Hydra might capture, but we want stdout)
    if not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(asctime)s][%(name)s][%(levelname)s] - %(message)s'))
        logging.getLogger().addHandler(handler)

    logging.info(f"Running economy: {cfg.experiment.name}")

    economy = Economy(cfg)
    results = economy.run()

    # Save results
    output_dir = cfg.experiment.output_dir
    os.makedirs(output_dir, exist_ok=True)
    results.to_csv(os.path.join(output_dir, "results.csv"), index=False)
    economy.price_history().to_csv(os.path.join(output_dir, "prices.csv"), index=False)
    with open(os.path.join(output_dir, "summary.json"), "w") as f:
        json.dump(economy.summary(), f, indent=2)

    logging.info(f"Results saved to {output_dir}")
    logging.info("Final money by recipe:")
    final = results[results["round"] == results["round"].max()]
    print(final.groupby("recipe")["money"].mean())


if __name__ == "__main__":
    main()
