"""A small shader project shared by the pipeline, report and CLI tests."""

from __future__ import annotations

from tests._fixtures.tree_builder import TreeBuilder

PANELS_JAVA = """
    package demo;

    public class ShaderPanels {
      @LXCategory("Noise")
      public static class Ripple extends ConstructedShaderPattern {
        public Ripple(LX lx) { super(lx); }

        @Override
        protected void createShader() {
          markUnused(controls.getLXControl(TEControlTag.WOW2));
          addShader("ripple.fs");
        }
      }

      @LXCategory("Noise")
      public static class Shimmer extends ConstructedShaderPattern {
        public Shimmer(LX lx) { super(lx); }

        @Override
        protected void createShader() {
          addShader("shimmer.fs");
          float s = getSpin();
        }
      }
    }
"""

LATTICE_JAVA = """
    package demo;

    @LXCategory("Geometry")
    public class Lattice extends GLShaderPattern {
      public Lattice(LX lx) {
        super(lx);
        addShader("lattice.fs");
        controls.setValue(TEControlTag.QUANTITY, 4);
      }
    }
"""

SHADERS = {
    "ripple.fs": "uniform float iWow2;\nuniform float iSpin;\nvoid main() {}\n",
    "shimmer.fs": "uniform vec2 iTranslate;\nvoid main() {}\n",
    "lattice.fs": "uniform float iScale;\nvoid main() {}\n",
    "glow.fs": (
        '#pragma name("Glow")\n'
        '#pragma LXCategory("Noise")\n'
        "#pragma TEControl.WOW1.Disable\n"
        "uniform float iQuantity;\n"
        "uniform float iWow1;\n"
        "void main() {}\n"
    ),
    "orphan.fs": "uniform float iWow1;\nvoid main() {}\n",
}

# Category, then display name.
EXPECTED_ORDER = ["Lattice", "Glow", "Ripple", "Shimmer"]


def write_demo_project(builder: TreeBuilder) -> TreeBuilder:
    builder.write(
        {
            "src/main/java/demo/ShaderPanels.java": PANELS_JAVA,
            "src/main/java/demo/Lattice.java": LATTICE_JAVA,
        }
    )
    for name, content in SHADERS.items():
        builder.shader(name, content)
    return builder


__all__ = ["EXPECTED_ORDER", "write_demo_project"]
