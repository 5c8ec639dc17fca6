import pandas as pd

from heirs import canonical_category, validate_composition
from inheritance_engine import InheritanceEngine
from scripts.validation import validate_distribution

DISTRIBUTION_COLUMNS = [
    "id_case", "heir", "label", "count", "share_fraction",
    "percentage", "amount", "notes", "is_awl", "is_radd",
]


def detect_heir_columns(df):
    """
    Detect the heir category columns of a household CSV.
    Returns None when the file is not in the expected format.
    """
    if "estate_value" not in df.columns:
        print("❌ Error: Missing required column 'estate_value'.")
        print(f"Detected columns: {set(df.columns)}")
        return None

    heir_columns = [col for col in df.columns if canonical_category(col)]
    if not heir_columns:
        print("❌ Error: No heir category columns found.")
        print(f"Detected columns: {set(df.columns)}")
        return None

    return heir_columns


def process_csv_file(input_file, engine: InheritanceEngine):
    """
    Compute the distribution of every household in a CSV file.

    Args:
        input_file (str): Path to CSV file, one household per row.
        engine (InheritanceEngine): Engine used for every row.

    Returns:
        pd.DataFrame: One row per share entry, or None for an invalid file.
    """
    df = pd.read_csv(input_file)
    if "id_case" in df.columns:
        df["id_case"] = df["id_case"].astype(str)

    heir_columns = detect_heir_columns(df)
    if heir_columns is None:
        return None

    records = []

    for idx, row in df.iterrows():
        case_id = row["id_case"] if "id_case" in df.columns else idx
        heirs = {col: row[col] for col in heir_columns if pd.notna(row[col])}

        try:
            if pd.isna(row["estate_value"]):
                raise ValueError("estate_value is empty")
            composition = validate_composition(heirs)
            result = engine.compute(composition, float(row["estate_value"]))
        except ValueError as e:
            print(f"❌ Error on case {case_id} (row {idx}): {e}")
            continue

        ok, reason = validate_distribution(result, engine.config.tolerance)
        if not ok:
            print(f"⚠️ Case {case_id}: {reason}")

        for entry in result.to_records():
            records.append({
                "id_case": case_id,
                **entry,
                "is_awl": result.is_proportionally_reduced,
                "is_radd": result.is_residue_returned,
            })

    return pd.DataFrame(records, columns=DISTRIBUTION_COLUMNS)
