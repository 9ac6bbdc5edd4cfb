# Desktop converter scripts shown on the "Python Script" tab.
# These are display text only; nothing in this app imports or runs them.

TKINTER_SCRIPT = '''import os
import tkinter as tk
from tkinter import filedialog, messagebox, ttk

import img2pdf
from pikepdf import Pdf, Encryption


class ImageToPdfConverter:
    def __init__(self, root):
        self.root = root
        self.root.title("PyPDF Pro Converter")
        self.root.geometry("600x500")
        self.selected_images = []
        self.build_ui()

    def build_ui(self):
        frame = tk.Frame(self.root, padx=20, pady=20)
        frame.pack(fill=tk.BOTH, expand=True)

        tk.Label(frame, text="PyPDF Pro Converter", font=("Arial", 18, "bold")).pack(pady=(0, 20))

        self.file_listbox = tk.Listbox(frame, font=("Arial", 10))
        self.file_listbox.pack(fill=tk.BOTH, expand=True, pady=10)

        buttons = tk.Frame(frame)
        buttons.pack(fill=tk.X, pady=10)
        tk.Button(buttons, text="Add Images", command=self.add_images).pack(side=tk.LEFT, padx=5)
        tk.Button(buttons, text="Clear List", command=self.clear_list).pack(side=tk.LEFT, padx=5)

        self.protect = tk.BooleanVar()
        tk.Checkbutton(frame, text="Enable Password Protection", variable=self.protect,
                       command=self.toggle_password).pack(anchor=tk.W)
        self.password_entry = tk.Entry(frame, show="*", state=tk.DISABLED)
        self.password_entry.pack(fill=tk.X, pady=5)

        self.progress = ttk.Progressbar(frame, orient=tk.HORIZONTAL, mode="determinate")
        self.progress.pack(fill=tk.X, pady=15)

        tk.Button(frame, text="CONVERT TO PDF", command=self.convert_to_pdf).pack(fill=tk.X)

    def toggle_password(self):
        state = tk.NORMAL if self.protect.get() else tk.DISABLED
        self.password_entry.config(state=state)

    def add_images(self):
        files = filedialog.askopenfilenames(
            title="Select Images",
            filetypes=[("Image files", "*.jpg *.png *.jpeg")],
        )
        for f in files:
            if f not in self.selected_images:
                self.selected_images.append(f)
                self.file_listbox.insert(tk.END, os.path.basename(f))

    def clear_list(self):
        self.selected_images = []
        self.file_listbox.delete(0, tk.END)

    def convert_to_pdf(self):
        if not self.selected_images:
            messagebox.showwarning("Warning", "Please select images first!")
            return

        password = self.password_entry.get()
        if self.protect.get() and not password:
            messagebox.showerror("Error", "Password is required for protection!")
            return

        save_path = filedialog.asksaveasfilename(defaultextension=".pdf",
                                                 filetypes=[("PDF files", "*.pdf")])
        if not save_path:
            return

        try:
            self.progress["value"] = 20
            self.root.update_idletasks()
            with open(save_path, "wb") as f:
                f.write(img2pdf.convert(self.selected_images))

            self.progress["value"] = 60
            self.root.update_idletasks()
            if self.protect.get():
                with Pdf.open(save_path, allow_overwriting_input=True) as pdf:
                    pdf.save(save_path, encryption=Encryption(owner=password, user=password))

            self.progress["value"] = 100
            messagebox.showinfo("Success", f"PDF created at:\\n{save_path}")
        except Exception as e:
            messagebox.showerror("Conversion Error", f"An error occurred: {e}")
        finally:
            self.progress["value"] = 0


if __name__ == "__main__":
    root = tk.Tk()
    ImageToPdfConverter(root)
    root.mainloop()
'''

KIVY_SCRIPT = '''import os

import img2pdf
from PyPDF2 import PdfReader, PdfWriter
from kivy.app import App
from kivy.core.window import Window
from kivy.uix.boxlayout import BoxLayout
from kivy.uix.button import Button
from kivy.uix.filechooser import FileChooserIconView
from kivy.uix.label import Label
from kivy.uix.popup import Popup
from kivy.uix.progressbar import ProgressBar
from kivy.uix.textinput import TextInput
from kivy.utils import get_color_from_hex

Window.clearcolor = get_color_from_hex("#fdfaff")
Window.size = (400, 700)


class MeenaxPDFApp(App):
    def build(self):
        self.title = "MEENAXPDF Mobile Pro"
        self.selected_files = []

        layout = BoxLayout(orientation="vertical", padding=20, spacing=15)
        layout.add_widget(Label(text="MEENAX[color=d81b60]PDF[/color]", markup=True,
                                font_size="32sp", bold=True, size_hint_y=None, height=50,
                                color=get_color_from_hex("#1e293b")))

        self.file_chooser = FileChooserIconView(filters=["*.jpg", "*.png", "*.jpeg"],
                                                multiselect=True,
                                                path=os.path.expanduser("~"))
        layout.add_widget(self.file_chooser)

        self.status_label = Label(text="No images selected", size_hint_y=None, height=30,
                                  color=get_color_from_hex("#64748b"))
        layout.add_widget(self.status_label)

        row = BoxLayout(size_hint_y=None, height=50, spacing=10)
        add_btn = Button(text="ADD SELECTED", bold=True)
        add_btn.bind(on_release=self.add_selected)
        clear_btn = Button(text="CLEAR ALL", bold=True)
        clear_btn.bind(on_release=self.clear_files)
        row.add_widget(add_btn)
        row.add_widget(clear_btn)
        layout.add_widget(row)

        self.password_input = TextInput(hint_text="Optional password", password=True,
                                        multiline=False, size_hint_y=None, height=45)
        layout.add_widget(self.password_input)

        self.progress = ProgressBar(max=100, size_hint_y=None, height=20)
        layout.add_widget(self.progress)

        convert_btn = Button(text="EXPORT PDF", bold=True, size_hint_y=None, height=60)
        convert_btn.bind(on_release=self.convert_to_pdf)
        layout.add_widget(convert_btn)
        return layout

    def add_selected(self, instance):
        for path in self.file_chooser.selection:
            if path not in self.selected_files:
                self.selected_files.append(path)
        self.status_label.text = f"{len(self.selected_files)} images selected"

    def clear_files(self, instance):
        self.selected_files = []
        self.file_chooser.selection = []
        self.status_label.text = "No images selected"

    def convert_to_pdf(self, instance):
        if not self.selected_files:
            self.show_popup("Warning", "Please select images first!")
            return

        try:
            self.progress.value = 20
            pdf_bytes = img2pdf.convert(self.selected_files)
            temp_pdf = "temp_unlocked.pdf"
            with open(temp_pdf, "wb") as f:
                f.write(pdf_bytes)

            self.progress.value = 60
            password = self.password_input.text.strip()
            final_file = "Meenax_Protected.pdf" if password else "Meenax_Export.pdf"

            if password:
                reader = PdfReader(temp_pdf)
                writer = PdfWriter()
                for page in reader.pages:
                    writer.add_page(page)
                writer.encrypt(user_password=password, owner_password=None)
                with open(final_file, "wb") as f:
                    writer.write(f)
                os.remove(temp_pdf)
            else:
                os.replace(temp_pdf, final_file)

            self.progress.value = 100
            self.show_popup("Success", f"PDF Exported as: {final_file}")
        except Exception as e:
            self.show_popup("Conversion Error", str(e))

    def show_popup(self, title, message):
        content = BoxLayout(orientation="vertical", padding=10, spacing=10)
        content.add_widget(Label(text=message, halign="center", text_size=(250, None)))
        close_btn = Button(text="CLOSE", size_hint_y=None, height=40)
        content.add_widget(close_btn)
        popup = Popup(title=title, content=content, size_hint=(0.8, 0.4))
        close_btn.bind(on_release=popup.dismiss)
        popup.open()


if __name__ == "__main__":
    MeenaxPDFApp().run()
'''
