import gradio as gr
import numpy as np
import PIL.Image

from .core import Renderer
from .scene import BlackHole, Camera, Scene, Settings

# Custom CSS to prevent the 'white flash' by hiding the Gradio loading spinner
# and keeping the old image visible.
CSS = """
.gradio-container { background-color: #0b0f19 !important; color: #e5e7eb !important; }
#output_img { background-color: #0b0f19 !important; border-radius: 8px; overflow: hidden; border: none !important; }
#output_img img { object-fit: contain; }

/* Keep the image fully opaque and sharp while generating */
.generating, .pending {
    opacity: 1 !important;
    filter: none !important;
    transition: none !important;
}

/* Hide ALL Gradio loading indicators, spinners, and progress bars */
.loading, .progress-view, .loader, .spinner {
    display: none !important;
    visibility: hidden !important;
}
"""


def build_scene(log_mass, distance, elevation_deg, iterations):
    """Scene with the camera on a circle of `distance` around the black hole, in the y-z plane."""
    elev = np.deg2rad(elevation_deg)
    position = distance * np.array([0.0, np.sin(elev), np.cos(elev)])
    camera = Camera.look_at(position, -position)
    return Scene(black_hole=BlackHole(mass=10.0 ** log_mass), camera=camera,
                 settings=Settings(iterations=int(iterations)))


def create_ui():

    def render_frame(log_mass, distance, elevation, iterations, photons, passes, resolution):
        renderer = Renderer(scene=build_scene(log_mass, distance, elevation, iterations))
        # Maintain 4:3 aspect ratio
        w = int(resolution)
        h = int(resolution * 0.75)

        image_data = renderer.render(width=w, height=h, passes=int(passes),
                                     batch_size=int(photons), seed=0)
        return PIL.Image.fromarray(image_data)

    with gr.Blocks(title="Black Hole Renderer") as demo:

        gr.Markdown("# Black Hole Renderer: Lensing Viewport")
        gr.Markdown("Photons traced past a Schwarzschild-like mass onto a pinhole sensor.")

        with gr.Row():
            with gr.Column(scale=1):
                with gr.Group():
                    gr.Markdown("### Black Hole")
                    mass_slider = gr.Slider(minimum=24.0, maximum=26.8, value=26.3, step=0.05,
                                            label="Mass (log10 kg)", info="Horizon radius grows linearly with mass")
                    iter_slider = gr.Slider(minimum=100, maximum=3000, value=1500, step=100,
                                            label="Step Budget", info="Iterations per photon")

                with gr.Group():
                    gr.Markdown("### Camera")
                    dist_slider = gr.Slider(minimum=1.0, maximum=6.0, value=2.92, step=0.01,
                                            label="Distance", info="From the black hole")
                    elev_slider = gr.Slider(minimum=-89, maximum=89, value=31, step=1,
                                            label="Elevation (degrees)", info="Above the emission plane")

                with gr.Group():
                    gr.Markdown("### Sampling")
                    photon_slider = gr.Slider(minimum=4096, maximum=262144, value=65536, step=4096,
                                              label="Photons per Pass")
                    pass_slider = gr.Slider(minimum=1, maximum=32, value=4, step=1, label="Passes")
                    res_slider = gr.Slider(minimum=64, maximum=640, value=320, step=32,
                                           label="Render Resolution", info="Lower for speed, higher for detail")
                    reset_btn = gr.Button("Reset Viewport", variant="secondary")

            with gr.Column(scale=2):
                output_img = gr.Image(label="Sensor", interactive=False, elem_id="output_img")

        inputs = [mass_slider, dist_slider, elev_slider, iter_slider,
                  photon_slider, pass_slider, res_slider]

        def reset_view():
            return [26.3, 2.92, 31, 1500, 65536, 4, 320]

        reset_btn.click(fn=reset_view, outputs=inputs)

        # Auto-render on any change
        for input_comp in inputs:
            if hasattr(input_comp, "change"):
                input_comp.change(fn=render_frame, inputs=inputs, outputs=output_img,
                                  trigger_mode="always_last", show_progress="hidden")

        # Initial render
        demo.load(fn=render_frame, inputs=inputs, outputs=output_img, show_progress="hidden")

    return demo


if __name__ == "__main__":
    demo = create_ui()
    demo.launch(css=CSS)
