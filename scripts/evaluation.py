import os
import csv
import json
import shutil
import argparse


def read_share_rows(filepath):
    """
    Read (id_case, heir) -> percentage from a distribution CSV.
    """
    with open(filepath, 'r', encoding='utf-8-sig') as f:
        reader = csv.DictReader(f)
        return {
            (row['id_case'].strip(), row['heir'].strip()): float(row['percentage'])
            for row in reader
        }


def evaluate(reference_path, prediction_path, output_dir=None, tolerance=0.01):
    """
    Evaluate computed shares against a reference distribution.
    A share is correct when its percentage is within tolerance of the reference.
    Optionally write a score file and a copy of the predictions into output_dir.
    """
    truth = read_share_rows(reference_path)
    preds = read_share_rows(prediction_path)

    if not truth:
        raise ValueError(f"Reference file has no shares: {reference_path}")

    # Compute metrics
    total_shares = len(truth)
    correct = sum(
        1 for key, expected in truth.items()
        if key in preds and abs(preds[key] - expected) <= tolerance
    )
    missing = sorted(key for key in truth if key not in preds)
    unexpected = sorted(key for key in preds if key not in truth)
    accuracy = correct / total_shares

    cases = {case_id for case_id, _ in truth}
    wrong_cases = {
        case_id for (case_id, heir), expected in truth.items()
        if (case_id, heir) not in preds or abs(preds[(case_id, heir)] - expected) > tolerance
    }
    wrong_cases.update(case_id for case_id, _ in unexpected)
    case_accuracy = (len(cases) - len(cases & wrong_cases)) / len(cases)

    scores = {
        'total_shares': total_shares,
        'correct_shares': correct,
        'accuracy': accuracy,
        'total_cases': len(cases),
        'case_accuracy': case_accuracy,
        'missing_shares': len(missing),
        'unexpected_shares': len(unexpected),
    }

    # Write scores and copy prediction file if output_dir provided
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        scores_path = os.path.join(output_dir, 'scores.json')

        with open(scores_path, 'w') as f:
            json.dump(scores, f, indent=2)

        basename = os.path.basename(prediction_path)
        shutil.copy(prediction_path, os.path.join(output_dir, basename))

    print("\n----------------------------------")
    print("       Evaluation Report:")
    print("----------------------------------")
    print(f"✅ Total shares = {total_shares}")
    print(f"✅ Correct shares = {correct}")
    print(f"✅ Accuracy = {100*round(accuracy, 4)}")
    print(f"✅ Case accuracy = {100*round(case_accuracy, 4)}")
    if missing:
        print(f"⚠️ Missing shares: {missing[:5]}")
    if unexpected:
        print(f"⚠️ Unexpected shares: {unexpected[:5]}")

    if output_dir:
        print(f"Score file written to {scores_path}")
        print("Prediction file copied to output directory.")

    return scores


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Compare computed inheritance shares with a reference file.")
    parser.add_argument('--reference', type=str, required=True, help='Path to reference distribution CSV')
    parser.add_argument('--prediction', type=str, required=True, help='Path to computed distribution CSV')
    parser.add_argument('--output', type=str, default=None, help='Directory for scores.json')
    parser.add_argument('--tolerance', type=float, default=0.01, help='Allowed percentage difference')
    args = parser.parse_args()
    evaluate(args.reference, args.prediction, args.output, args.tolerance)
