import pandas as pd
import os


def summarize_cases(df: pd.DataFrame) -> pd.DataFrame:
    """
    Collapse a long-format distribution into one row per case.

    Returns:
        pd.DataFrame: id_case, heirs, total_percentage, total_amount, is_awl, is_radd
    """
    if df.empty:
        return pd.DataFrame(columns=["id_case", "heirs", "total_percentage", "total_amount", "is_awl", "is_radd"])

    summary = df.groupby("id_case", sort=False).agg(
        heirs=("heir", "count"),
        total_percentage=("percentage", "sum"),
        total_amount=("amount", "sum"),
        is_awl=("is_awl", "any"),
        is_radd=("is_radd", "any"),
    )
    return summary.reset_index()


def save_distribution_file(df: pd.DataFrame, file_path):
    """
    Save two CSV files:
    1. Full distribution with one row per share entry.
    2. Summary file with one row per case.
    """
    os.makedirs(os.path.dirname(file_path) or ".", exist_ok=True)
    df.to_csv(file_path, index=False, encoding='utf-8-sig')

    summary_path = os.path.join(
        os.path.dirname(file_path),
        f"{os.path.splitext(os.path.basename(file_path))[0]}_summary.csv"
    )
    summarize_cases(df).to_csv(summary_path, index=False, encoding='utf-8-sig')
    print(f"✅ Summary file saved: {summary_path}")
    return summary_path
