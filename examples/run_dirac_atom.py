#!/usr/bin/env python
"""类氢原子 Dirac 本征态计算入口。

支持电子/μ 子、点核/均匀球核、可选 Uehling 修正，可导出能级并绘制径向波函数。

示例::

    python examples/run_dirac_atom.py --Z 8 --A 16 --particle mu --radius sphere --max-n 2 --plot
"""

import argparse
import json
import sys
from pathlib import Path

# 添加 src 到路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from atomdirac import DiracAtom, NuclearRadiusModel, SolverConfig
from atomdirac.constants import EV, M_E, M_MU
from atomdirac.logging_config import set_log_level

PARTICLE_MASS = {"e": M_E, "mu": M_MU}


def build_atom(args) -> DiracAtom:
    config = SolverConfig(e_tol=args.tol, max_iterations=args.maxiter)
    return DiracAtom(
        Z=args.Z,
        m=PARTICLE_MASS[args.particle],
        A=args.A,
        radius_model=NuclearRadiusModel(args.radius),
        dx=args.dx,
        uehling=args.uehling,
        config=config,
    )


def state_label(n: int, l: int, s: bool) -> str:
    j2 = 2 * l - 1 if (s and l > 0) else 2 * l + 1
    return f"{n}{'spdfghik'[l]}{j2}/2"


def main():
    parser = argparse.ArgumentParser(
        description="类氢原子 Dirac 本征态求解",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--Z", type=float, required=True, help="核电荷")
    parser.add_argument("--A", type=float, default=None, help="核质量数（缺省为无限重点核）")
    parser.add_argument("--particle", choices=sorted(PARTICLE_MASS), default="e", help="束缚粒子")
    parser.add_argument(
        "--radius",
        choices=[m.value for m in NuclearRadiusModel],
        default="point",
        help="核半径模型",
    )
    parser.add_argument("--uehling", action="store_true", help="加入 Uehling 真空极化修正")
    parser.add_argument("--dx", type=float, default=0.005, help="对数网格步长")
    parser.add_argument("--max-n", type=int, default=1, help="计算的最大主量子数")
    parser.add_argument("--tol", type=float, default=1e-7, help="能量收敛阈值 (Hartree)")
    parser.add_argument("--maxiter", type=int, default=100, help="最大迭代次数")
    parser.add_argument("--export", type=str, default=None, help="导出能级到 JSON")
    parser.add_argument("--plot", action="store_true", help="绘制径向波函数（需要 matplotlib）")
    parser.add_argument("--verbose", action="store_true", help="输出 INFO 级日志")
    args = parser.parse_args()

    if args.verbose:
        import logging

        set_log_level(logging.INFO)

    atom = build_atom(args)
    atom.calc_all_states(args.max_n)

    rows = []
    print(f"{'态':>8s} {'E - mc^2 (Ha)':>22s} {'E - mc^2 (eV)':>22s}")
    for key in sorted(atom.states):
        st = atom.states[key]
        B = st.E - atom.rest_energy
        label = state_label(*key)
        rows.append({"state": label, "n": key.n, "l": key.l, "s": key.s, "E": st.E, "binding": B})
        print(f"{label:>8s} {B:22.12e} {B / EV:22.12e}")

    if args.export:
        with open(args.export, "w", encoding="utf-8") as f:
            json.dump({"Z": args.Z, "A": args.A, "particle": args.particle, "states": rows}, f, indent=2)
        print(f"已导出到 {args.export}")

    if args.plot:
        import matplotlib.pyplot as plt

        fig, axes = plt.subplots(2, 1, sharex=True, figsize=(7, 6))
        for key in sorted(atom.states):
            st = atom.states[key]
            axes[0].plot(st.grid.r, st.P, label=state_label(*key))
            axes[1].plot(st.grid.r, st.Q, label=state_label(*key))
        axes[0].set_ylabel("P(r)")
        axes[1].set_ylabel("Q(r)")
        axes[1].set_xlabel("r (Bohr)")
        axes[1].set_xscale("log")
        axes[0].legend()
        fig.tight_layout()
        plt.show()


if __name__ == "__main__":
    main()
