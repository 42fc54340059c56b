"""
Delivery Rate Heatmap Visualization

This module generates 2D heatmaps showing delivery rate as a function of
burst onset probability P(G->B) and payload size.
"""

import os
from typing import Dict, List, Optional, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from framelink.config import PLOTS_DIR


class DeliveryHeatmap:
    """
    Generates 2D heatmaps of DeliveryRate(P(G->B), L).

    Attributes:
        frame: Sweep results as a DataFrame
    """

    def __init__(
        self,
        results: Optional[List[Dict]] = None,
        csv_file: Optional[str] = None
    ):
        """
        Initialize heatmap generator.

        Args:
            results: List of result dictionaries
            csv_file: Path to CSV file with results
        """
        if results:
            self.frame = pd.DataFrame(results)
        elif csv_file:
            self.frame = pd.read_csv(csv_file)
        else:
            self.frame = pd.DataFrame()

        if 'error' in self.frame.columns:
            self.frame = self.frame[self.frame['error'].isna()]

    def create_matrix(self, metric: str = 'delivery_rate') -> pd.DataFrame:
        """
        Pivot mean metric values into a P(G->B) x payload size matrix.

        Rows are sorted with the noisiest channel at the top.

        Args:
            metric: Result column to average

        Returns:
            DataFrame indexed by p_good_to_bad, columns payload_size
        """
        if self.frame.empty:
            raise ValueError("No results to plot")

        matrix = self.frame.pivot_table(
            index='p_good_to_bad',
            columns='payload_size',
            values=metric,
            aggfunc='mean'
        )
        return matrix.sort_index(ascending=False)

    def find_best(self, metric: str = 'delivery_rate') -> Tuple[float, int, float]:
        """
        Find the cell with the highest mean metric value.

        Returns:
            Tuple of (p_good_to_bad, payload_size, value)
        """
        stacked = self.create_matrix(metric).stack()
        p_good_to_bad, payload_size = stacked.idxmax()
        return p_good_to_bad, payload_size, stacked.max()

    def plot(
        self,
        output_file: Optional[str] = None,
        metric: str = 'delivery_rate',
        title: str = "Delivery Rate vs Burst Onset Probability and Payload Size",
        figsize: Tuple[int, int] = (12, 8),
        cmap: str = "viridis",
        show_values: bool = True
    ) -> str:
        """
        Generate and save heatmap.

        Args:
            output_file: Output file path (auto-generated if None)
            metric: Result column to plot
            title: Plot title
            figsize: Figure size (width, height)
            cmap: Colormap name
            show_values: Show values in cells

        Returns:
            Path to saved figure
        """
        matrix = self.create_matrix(metric)
        label = metric.replace('_', ' ').title()

        fig, ax = plt.subplots(figsize=figsize)
        sns.heatmap(
            matrix,
            annot=show_values,
            fmt='.3f',
            cmap=cmap,
            ax=ax,
            cbar_kws={'label': label}
        )

        ax.set_xlabel('Payload Size (bytes)', fontsize=12)
        ax.set_ylabel('P(G->B)', fontsize=12)
        ax.set_title(title, fontsize=14, fontweight='bold')

        plt.tight_layout()

        if output_file is None:
            os.makedirs(PLOTS_DIR, exist_ok=True)
            output_file = os.path.join(PLOTS_DIR, f'{metric}_heatmap.png')
        else:
            directory = os.path.dirname(output_file)
            if directory:
                os.makedirs(directory, exist_ok=True)

        fig.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)

        print(f"Heatmap saved to: {output_file}")
        return output_file


if __name__ == "__main__":
    import random

    print("=" * 60)
    print("HEATMAP GENERATOR TEST")
    print("=" * 60)

    from framelink.config import LOSS_PROBABILITIES, PAYLOAD_SIZES

    test_results = []
    for p in LOSS_PROBABILITIES:
        for size in PAYLOAD_SIZES:
            for run in range(3):
                rate = max(0.0, 1.0 - p * size * 0.4 + random.gauss(0, 0.02))
                test_results.append({
                    'p_good_to_bad': p,
                    'payload_size': size,
                    'run_id': run,
                    'delivery_rate': min(rate, 1.0)
                })

    print(f"Generated {len(test_results)} test results")

    heatmap = DeliveryHeatmap(results=test_results)
    output = heatmap.plot(title="Test Delivery Heatmap")
    print(f"Test complete: {output}")
