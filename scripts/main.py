import os
import argparse
import pandas as pd
import yaml

from inheritance_engine import EngineConfig, create_engine
from scripts.inference import process_csv_file
from scripts.utils import save_distribution_file


def load_config(config_path: str):
    """
    Load YAML configuration file: input/output directories and engine policy.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    input_dir = config.get("paths", {}).get("input_dir")
    output_dir = config.get("paths", {}).get("output_dir")

    if not input_dir or not output_dir:
        raise ValueError("❌ paths.input_dir and paths.output_dir are required in configuration file.")

    engine_config = EngineConfig.from_dict(config.get("engine"))

    return input_dir, output_dir, engine_config


def distribute_from_directory(config_path="config.yaml") -> pd.DataFrame:
    """
    Batch process all household CSV files in input directory and save distributions.
    """
    all_distributions_df = pd.DataFrame()
    input_dir, output_dir, engine_config = load_config(config_path)
    engine = create_engine(engine_config)
    print(f"✅ Engine policy: tolerance={engine_config.tolerance}, spouse_only_radd={engine_config.spouse_only_radd}")
    for file in sorted(os.listdir(input_dir)):
        if file.endswith(".csv") and "_distribution" not in file:
            try:
                print(f"🚀 Processing file: {file}")
                input_path = os.path.join(input_dir, file)
                df = process_csv_file(input_path, engine)
                if df is None:
                    print(f"⚠️ Skipping file {file} due to invalid format.")
                    continue
                df.insert(0, "source_file", file)
                all_distributions_df = pd.concat([all_distributions_df, df], ignore_index=True)
                output_file = os.path.join(output_dir, f"{os.path.splitext(file)[0]}_distribution.csv")
                save_distribution_file(df, output_file)
            except (OSError, ValueError) as e:
                print(f"❌ Error processing file {file}: {e}")
    return all_distributions_df


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Compute Islamic inheritance distributions for household CSV files.")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to YAML configuration file')
    args = parser.parse_args()
    distribute_from_directory(args.config)
