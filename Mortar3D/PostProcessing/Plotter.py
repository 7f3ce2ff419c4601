from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d.art3d import Line3DCollection, Poly3DCollection

from Mortar3D.Objects.Contact.Clipping import get_cells


@dataclass
class PlotStyle:
    """Configuration for contact surface plots."""
    # --- Element outlines ---
    slave_color: str = '#d62728'
    master_color: str = '#1f77b4'
    element_linewidth: float = 0.8
    element_alpha: float = 0.8

    # --- Contact segments ---
    segment_fill: str = '#a6cee3'
    segment_alpha: float = 0.6
    cell_color: str = '#555555'
    cell_linewidth: float = 0.4

    # --- Node states ---
    active_color: str = '#2ca02c'
    inactive_color: str = '#7f7f7f'
    node_size: float = 20
    normal_scale: float = 0.1

    # --- Figure Layout ---
    figsize: Tuple[float, float] = (7, 6)
    dpi: int = 300
    label_fontsize: int = 11

    @classmethod
    def default(cls):
        return cls()


class ContactPlotter:
    """3D views of contact segmentations and node states."""

    @staticmethod
    def _setup_figure(style: Optional[PlotStyle], figsize=None):
        if style is None:
            style = PlotStyle()
        fig = plt.figure(figsize=figsize if figsize else style.figsize)
        ax = fig.add_subplot(111, projection='3d')
        ax.set_xlabel("x", fontsize=style.label_fontsize)
        ax.set_ylabel("y", fontsize=style.label_fontsize)
        ax.set_zlabel("z", fontsize=style.label_fontsize)
        return fig, ax, style

    @staticmethod
    def _finalize_figure(fig, ax, points: np.ndarray, style: PlotStyle, save_path: Optional[str], title):
        if len(points):
            lo, hi = points.min(axis=0), points.max(axis=0)
            pad = 0.05 * max(float(np.max(hi - lo)), 1e-12)
            ax.set_xlim(lo[0] - pad, hi[0] + pad)
            ax.set_ylim(lo[1] - pad, hi[1] + pad)
            ax.set_zlim(lo[2] - pad, hi[2] + pad)
        if title:
            ax.set_title(title)
        fig.tight_layout()
        if save_path:
            fig.savefig(save_path, dpi=style.dpi, bbox_inches='tight')
            print(f"Saved: {save_path}")

    @staticmethod
    def _outline_segments(elements: Iterable, time: float):
        segments = []
        for element in elements:
            X = element.geometry(time, deformed=True)[element.outline()]
            segments.extend([[X[i], X[(i + 1) % len(X)]] for i in range(len(X))])
        return segments

    @staticmethod
    def plot_segmentation(slave_element, segments, time: float = 0.0, style: PlotStyle = None,
                          figsize=None, save_path=None, title=None, show_cells=True):
        """
        Slave element, its master elements and the clipped contact polygons.

        Parameters
        ----------
        slave_element : Element3D
        segments : list of ContactSegment
            Result of create_contact_segmentation / MortarContact.last_segmentation
        """
        fig, ax, style = ContactPlotter._setup_figure(style, figsize)

        masters = [s.master_element for s in segments]
        ax.add_collection3d(Line3DCollection(ContactPlotter._outline_segments([slave_element], time),
                                             colors=style.slave_color, linewidths=style.element_linewidth,
                                             alpha=style.element_alpha))
        if masters:
            ax.add_collection3d(Line3DCollection(ContactPlotter._outline_segments(masters, time),
                                                 colors=style.master_color, linewidths=style.element_linewidth,
                                                 alpha=style.element_alpha))

        polygons = [s.vertices for s in segments]
        if polygons:
            ax.add_collection3d(Poly3DCollection(polygons, facecolors=style.segment_fill,
                                                 alpha=style.segment_alpha))
        if show_cells:
            for s in segments:
                cells = [c.vertices for c in get_cells(s.vertices, s.centroid)]
                ax.add_collection3d(Line3DCollection(
                    [[v[i], v[(i + 1) % 3]] for v in cells for i in range(3)],
                    colors=style.cell_color, linewidths=style.cell_linewidth))

        points = [slave_element.geometry(time, deformed=True)]
        points += [m.geometry(time, deformed=True) for m in masters]
        ContactPlotter._finalize_figure(fig, ax, np.vstack(points), style, save_path, title)
        return fig

    @staticmethod
    def plot_contact_state(problem, assembly, time: float = 0.0, style: PlotStyle = None,
                           figsize=None, save_path=None, title=None, show_normals=True):
        """Slave/master surfaces with active (green) and inactive (grey) slave nodes."""
        fig, ax, style = ContactPlotter._setup_figure(style, figsize)

        ax.add_collection3d(Line3DCollection(ContactPlotter._outline_segments(problem.slave_elements, time),
                                             colors=style.slave_color, linewidths=style.element_linewidth))
        ax.add_collection3d(Line3DCollection(ContactPlotter._outline_segments(problem.master_elements, time),
                                             colors=style.master_color, linewidths=style.element_linewidth))

        coords = {}
        for element in problem.elements:
            for node, x in zip(element.connect, element.geometry(time, deformed=True)):
                coords[int(node)] = x

        nodes = sorted(assembly.states)
        xyz = np.array([coords[j] for j in nodes])
        colors = [style.active_color if assembly.states[j].is_active else style.inactive_color
                  for j in nodes]
        ax.scatter(xyz[:, 0], xyz[:, 1], xyz[:, 2], c=colors, s=style.node_size, depthshade=False)

        if show_normals:
            n = np.array([assembly.normals[j] for j in nodes]) * style.normal_scale
            ax.quiver(xyz[:, 0], xyz[:, 1], xyz[:, 2], n[:, 0], n[:, 1], n[:, 2],
                      color=style.slave_color, linewidth=0.6)

        ContactPlotter._finalize_figure(fig, ax, np.array(list(coords.values())), style, save_path, title)
        return fig
